"""
Deployment fee calculation
"""

from nova_launch.models import Fee, TokenDeployParams

# Fee structure (XLM): base deployment 5-10, metadata adds 2-5
BASE_FEE_XLM = 7
METADATA_FEE_XLM = 3


def calculate_fee(has_metadata: bool) -> Fee:
    """Derive the deployment fee; metadata is the only input that matters"""
    base_fee = BASE_FEE_XLM
    metadata_fee = METADATA_FEE_XLM if has_metadata else 0
    return Fee(
        base_fee=base_fee,
        metadata_fee=metadata_fee,
        total_fee=base_fee + metadata_fee,
    )


def calculate_deployment_fee(params: TokenDeployParams) -> Fee:
    return calculate_fee(params.has_metadata)

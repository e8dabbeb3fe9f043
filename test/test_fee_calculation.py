"""
Property tests for deployment fee calculation

Base deployment is 5-10 XLM; metadata adds 2-5 XLM.
"""

from hypothesis import given
from hypothesis import strategies as st

from helpers import WALLET_ADDRESS
from nova_launch.models import TokenDeployParams, TokenMetadata
from nova_launch.utils.fees import calculate_deployment_fee, calculate_fee

metadata = st.one_of(
    st.none(),
    st.builds(TokenMetadata, description=st.text(max_size=500), image_cid=st.none()),
)

token_params = st.builds(
    TokenDeployParams,
    name=st.text(alphabet='abcdefghijklmnopqrstuvwxyz ABCXYZ0123456789', min_size=1, max_size=32),
    symbol=st.text(alphabet='ABCDEFGHIJKLMNOPQRSTUVWXYZ', min_size=1, max_size=12),
    decimals=st.integers(min_value=0, max_value=18),
    initial_supply=st.integers(min_value=1, max_value=10 ** 30).map(str),
    admin_wallet=st.just(WALLET_ADDRESS),
    metadata=metadata,
)


@given(token_params)
def test_fee_within_structure(params):
    fee = calculate_deployment_fee(params)

    assert 5 <= fee.base_fee <= 10
    if params.metadata is not None:
        assert 2 <= fee.metadata_fee <= 5
    else:
        assert fee.metadata_fee == 0
    assert fee.total_fee == fee.base_fee + fee.metadata_fee


@given(token_params)
def test_fee_is_deterministic(params):
    assert calculate_deployment_fee(params) == calculate_deployment_fee(params)


@given(st.booleans())
def test_fee_from_flag(has_metadata):
    fee = calculate_fee(has_metadata)
    assert (fee.metadata_fee == 0) == (not has_metadata)
    assert fee.total_stroops == fee.total_fee * 10_000_000


def test_fee_dict_uses_display_keys():
    assert calculate_fee(True).to_dict() == {'baseFee': 7, 'metadataFee': 3, 'totalFee': 10}
    assert calculate_fee(False).to_dict() == {'baseFee': 7, 'metadataFee': 0, 'totalFee': 7}

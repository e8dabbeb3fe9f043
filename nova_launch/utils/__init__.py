from .validation import (
    is_valid_stellar_address,
    is_valid_contract_address,
    is_valid_token_name,
    is_valid_token_symbol,
    is_valid_decimals,
    is_valid_supply,
    is_valid_image_file,
    is_valid_description,
    validate_token_params,
)
from .fees import calculate_fee, calculate_deployment_fee, BASE_FEE_XLM, METADATA_FEE_XLM
from .errors import (
    ErrorCode,
    AppError,
    ERROR_MESSAGES,
    create_error,
    is_app_error,
    get_error_message,
    to_app_error,
)

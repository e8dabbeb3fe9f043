"""
Validation helpers for token deployment parameters

Every predicate returns a bool (or a result object) and never raises,
so the deploy form can collect all problems in one pass.
"""

import re
from typing import Any, Mapping, Union

from nova_launch.models import (
    FileValidationResult,
    ImageFile,
    TokenDeployParams,
    ValidationResult,
)

# Stellar StrKey: version char + 55 base32 chars
STELLAR_ADDRESS_RE = re.compile(r'^G[A-Z2-7]{55}$')
CONTRACT_ADDRESS_RE = re.compile(r'^C[A-Z2-7]{55}$')
TOKEN_NAME_RE = re.compile(r'^[a-zA-Z0-9 ]+$')
TOKEN_SYMBOL_RE = re.compile(r'^[A-Z]+$')
SUPPLY_RE = re.compile(r'^\d+$')

MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 12
MAX_DECIMALS = 18
MAX_DESCRIPTION_LENGTH = 500
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB

ALLOWED_IMAGE_TYPES = ('image/png', 'image/jpeg', 'image/jpg', 'image/svg+xml')


def is_valid_stellar_address(address: Any) -> bool:
    """Check for a well-formed account address (G...)"""
    return isinstance(address, str) and bool(STELLAR_ADDRESS_RE.fullmatch(address))


def is_valid_contract_address(address: Any) -> bool:
    """Check for a well-formed contract address (C...)"""
    return isinstance(address, str) and bool(CONTRACT_ADDRESS_RE.fullmatch(address))


def is_valid_token_name(name: Any) -> bool:
    """Letters, digits and spaces, 1-32 characters"""
    if not isinstance(name, str) or not name:
        return False
    return len(name) <= MAX_NAME_LENGTH and bool(TOKEN_NAME_RE.fullmatch(name))


def is_valid_token_symbol(symbol: Any) -> bool:
    """Uppercase letters only, 1-12 characters"""
    if not isinstance(symbol, str) or not symbol:
        return False
    return len(symbol) <= MAX_SYMBOL_LENGTH and bool(TOKEN_SYMBOL_RE.fullmatch(symbol))


def is_valid_decimals(decimals: Any) -> bool:
    """Whole number between 0 and 18 inclusive"""
    if isinstance(decimals, bool):
        return False
    if isinstance(decimals, float):
        if not decimals.is_integer():
            return False
        decimals = int(decimals)
    if not isinstance(decimals, int):
        return False
    return 0 <= decimals <= MAX_DECIMALS


def is_valid_supply(supply: Any) -> bool:
    """Positive integer written as a decimal string"""
    if not isinstance(supply, str) or not SUPPLY_RE.fullmatch(supply):
        return False
    return int(supply) > 0


def is_valid_image_file(image: Any) -> FileValidationResult:
    """Check image type and size before upload"""
    if not isinstance(image, ImageFile) or image.content_type not in ALLOWED_IMAGE_TYPES:
        return FileValidationResult(
            valid=False,
            error='Invalid file type. Please upload PNG, JPG, or SVG',
        )

    if image.size > MAX_IMAGE_SIZE:
        return FileValidationResult(
            valid=False,
            error='File size must be less than 5MB',
        )

    return FileValidationResult(valid=True)


def is_valid_description(description: Any) -> bool:
    """Descriptions are optional but capped at 500 characters"""
    if description is None:
        return True
    return isinstance(description, str) and len(description) <= MAX_DESCRIPTION_LENGTH


def validate_token_params(params: Union[TokenDeployParams, Mapping[str, Any]]) -> ValidationResult:
    """Validate a full parameter set

    Returns:
        ValidationResult whose errors map holds only the failing fields
    """
    if not isinstance(params, TokenDeployParams):
        params = TokenDeployParams.from_dict(params)

    errors = {}

    if not is_valid_token_name(params.name):
        errors['name'] = 'Token name must be 1-32 alphanumeric characters'

    if not is_valid_token_symbol(params.symbol):
        errors['symbol'] = 'Symbol must be 1-12 uppercase letters'

    if not is_valid_decimals(params.decimals):
        errors['decimals'] = 'Decimals must be between 0 and 18'

    if not is_valid_supply(params.initial_supply):
        errors['initial_supply'] = 'Initial supply must be a positive whole number'

    if not is_valid_stellar_address(params.admin_wallet):
        errors['admin_wallet'] = 'Invalid Stellar address'

    if params.metadata is not None:
        if not is_valid_description(params.metadata.description):
            errors['description'] = 'Description must be 500 characters or less'

        if params.metadata.image is not None:
            image_result = is_valid_image_file(params.metadata.image)
            if not image_result.valid:
                errors['image'] = image_result.error

    return ValidationResult(valid=not errors, errors=errors)

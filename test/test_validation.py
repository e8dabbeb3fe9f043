"""
Tests for token parameter validation
"""

from helpers import WALLET_ADDRESS, mock_file
from nova_launch.models import ImageFile, TokenDeployParams, TokenMetadata
from nova_launch.utils.validation import (
    is_valid_contract_address,
    is_valid_decimals,
    is_valid_description,
    is_valid_image_file,
    is_valid_stellar_address,
    is_valid_supply,
    is_valid_token_name,
    is_valid_token_symbol,
    validate_token_params,
)


def test_accepts_valid_stellar_addresses():
    assert is_valid_stellar_address(WALLET_ADDRESS)
    assert is_valid_stellar_address('GA7QYNF7SOWQ3GLR2BGMZEHXAVIRZA4KVWLTJJFC7MGXUA74P7UJVSGZ')


def test_rejects_invalid_stellar_addresses():
    assert not is_valid_stellar_address('invalid')
    assert not is_valid_stellar_address('A' + 'X' * 55)
    assert not is_valid_stellar_address('GXXX')
    assert not is_valid_stellar_address('')
    assert not is_valid_stellar_address(WALLET_ADDRESS + 'X')
    assert not is_valid_stellar_address(None)


def test_contract_addresses_use_c_prefix():
    assert is_valid_contract_address('C' + 'A' * 55)
    assert not is_valid_contract_address(WALLET_ADDRESS)


def test_token_names():
    assert is_valid_token_name('My Token')
    assert is_valid_token_name('Token123')
    assert is_valid_token_name('A')
    assert is_valid_token_name('a' * 32)

    assert not is_valid_token_name('')
    assert not is_valid_token_name('a' * 33)
    assert not is_valid_token_name('Token@123')


def test_token_symbols():
    assert is_valid_token_symbol('USD')
    assert is_valid_token_symbol('MYTOKEN')
    assert is_valid_token_symbol('A')

    assert not is_valid_token_symbol('')
    assert not is_valid_token_symbol('usd')
    assert not is_valid_token_symbol('USD123')
    assert not is_valid_token_symbol('A' * 13)


def test_decimals():
    for value in (0, 7, 18, 7.0):
        assert is_valid_decimals(value), value

    for value in (-1, 19, 1.5, '7', None, True):
        assert not is_valid_decimals(value), value


def test_supply():
    assert is_valid_supply('1')
    assert is_valid_supply('1000000')
    assert is_valid_supply('9007199254740991')
    assert is_valid_supply('340282366920938463463374607431768211455')

    for value in ('0', '-1', 'invalid', '', '1.5', 100):
        assert not is_valid_supply(value), value


def test_image_file_types():
    assert is_valid_image_file(mock_file('test.png', 0, 'image/png')).valid
    assert is_valid_image_file(mock_file('test.jpg', 0, 'image/jpeg')).valid
    assert is_valid_image_file(mock_file('logo.svg', 10, 'image/svg+xml')).valid

    result = is_valid_image_file(mock_file('test.txt', 0, 'text/plain'))
    assert not result.valid
    assert 'PNG, JPG, or SVG' in result.error


def test_image_file_too_large():
    result = is_valid_image_file(mock_file('large.png', 6 * 1024 * 1024))
    assert not result.valid
    assert '5MB' in result.error

    exactly_five = ImageFile(name='edge.png', content_type='image/png', declared_size=5 * 1024 * 1024)
    assert is_valid_image_file(exactly_five).valid


def test_description():
    assert is_valid_description('Short description')
    assert is_valid_description('a' * 500)
    assert is_valid_description(None)
    assert not is_valid_description('a' * 501)


def test_validate_correct_parameters():
    result = validate_token_params(TokenDeployParams(
        name='My Token',
        symbol='MTK',
        decimals=7,
        initial_supply='1000000',
        admin_wallet=WALLET_ADDRESS,
    ))
    assert result.valid
    assert result.errors == {}


def test_validate_reports_every_bad_field():
    result = validate_token_params({
        'name': '',
        'symbol': 'invalid',
        'decimals': 20,
        'initialSupply': '0',
        'adminWallet': 'invalid',
    })
    assert not result.valid
    assert set(result.errors) == {'name', 'symbol', 'decimals', 'initial_supply', 'admin_wallet'}
    assert all(result.errors.values())


def test_validate_only_lists_failing_fields():
    result = validate_token_params({
        'name': 'My Token',
        'symbol': 'mtk',
        'decimals': 7,
        'initialSupply': '1000000',
        'adminWallet': WALLET_ADDRESS,
    })
    assert not result.valid
    assert list(result.errors) == ['symbol']


def test_validate_checks_metadata():
    params = TokenDeployParams(
        name='My Token',
        symbol='MTK',
        decimals=7,
        initial_supply='1000000',
        admin_wallet=WALLET_ADDRESS,
        metadata=TokenMetadata(
            description='a' * 501,
            image=mock_file('doc.pdf', 10, 'application/pdf'),
        ),
    )
    result = validate_token_params(params)
    assert not result.valid
    assert set(result.errors) == {'description', 'image'}


def test_trailing_newline_is_not_accepted():
    assert not is_valid_stellar_address(WALLET_ADDRESS + '\n')
    assert not is_valid_contract_address('C' + 'A' * 55 + '\n')
    assert not is_valid_token_name('My Token\n')
    assert not is_valid_token_symbol('MTK\n')
    assert not is_valid_supply('1000\n')

    result = validate_token_params({
        'name': 'My Token\n',
        'symbol': 'MTK\n',
        'decimals': 7,
        'initialSupply': '1000\n',
        'adminWallet': WALLET_ADDRESS + '\n',
    })
    assert set(result.errors) == {'name', 'symbol', 'initial_supply', 'admin_wallet'}


def test_image_that_is_not_a_file_is_rejected():
    result = is_valid_image_file({'name': 'logo.png', 'type': 'image/png', 'size': 10})
    assert not result.valid
    assert result.error == 'Invalid file type. Please upload PNG, JPG, or SVG'
    assert not is_valid_image_file(None).valid


def test_validate_json_payload_with_image_metadata():
    def payload(image):
        return {
            'name': 'My Token',
            'symbol': 'MTK',
            'decimals': 7,
            'initialSupply': '1000000',
            'adminWallet': WALLET_ADDRESS,
            'metadata': {'description': 'A token', 'image': image},
        }

    ok = validate_token_params(payload({'name': 'logo.png', 'type': 'image/png', 'size': 1024}))
    assert ok.valid

    bad_type = validate_token_params(payload({'name': 'doc.pdf', 'type': 'application/pdf', 'size': 10}))
    assert bad_type.errors == {'image': 'Invalid file type. Please upload PNG, JPG, or SVG'}

    too_big = validate_token_params(payload({'name': 'big.png', 'type': 'image/png', 'size': 6 * 1024 * 1024}))
    assert too_big.errors == {'image': 'File size must be less than 5MB'}

    params = TokenDeployParams.from_dict(payload({'name': 'logo.svg', 'contentType': 'image/svg+xml', 'size': 5}))
    assert params.metadata.image == ImageFile(name='logo.svg', content_type='image/svg+xml', declared_size=5)

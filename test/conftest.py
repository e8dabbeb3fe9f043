import pytest

from helpers import TOKEN_ADDRESS, WALLET_ADDRESS


@pytest.fixture
def wallet_address():
    return WALLET_ADDRESS


@pytest.fixture
def token_address():
    return TOKEN_ADDRESS


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / 'webhooks.db')

"""
Test helper utilities
"""

from nova_launch.models import ImageFile

WALLET_ADDRESS = 'G' + 'X' * 55
TOKEN_ADDRESS = 'C' + 'X' * 55


def mock_file(name: str = 'test.png', size: int = 1024, content_type: str = 'image/png') -> ImageFile:
    return ImageFile(name=name, content_type=content_type, data=b'x' * size)


def mock_transaction_hash() -> str:
    return 'a' * 64

"""
Tests for the Pinata IPFS service (HTTP calls are faked)
"""

import asyncio

import pytest
import requests
from aiohttp import test_utils, web

from helpers import WALLET_ADDRESS, mock_file
from nova_launch.models import TokenDeployParams, TokenMetadata
from nova_launch.services import ipfs_service
from nova_launch.services.ipfs_service import IPFSService
from nova_launch.utils.errors import AppError, ErrorCode


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


@pytest.fixture
def service():
    return IPFSService(api_key='key', secret_key='secret')


@pytest.fixture
def posts(monkeypatch):
    """Record requests.post calls and answer with sequential CIDs"""
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        return FakeResponse(payload={'IpfsHash': f"Qm{len(calls)}"})

    monkeypatch.setattr(ipfs_service.requests, 'post', fake_post)
    return calls


def test_upload_image(service, posts):
    cid = service.upload_image(mock_file('logo.png', 100))

    assert cid == 'Qm1'
    url, kwargs = posts[0]
    assert url.endswith('/pinning/pinFileToIPFS')
    assert kwargs['headers']['pinata_api_key'] == 'key'
    assert kwargs['files']['file'][0] == 'logo.png'


def test_upload_rejects_invalid_image(service, posts):
    with pytest.raises(AppError) as exc_info:
        service.upload_image(mock_file('notes.txt', 10, 'text/plain'))

    assert exc_info.value.code is ErrorCode.INVALID_INPUT
    assert posts == []


def test_missing_keys(monkeypatch):
    monkeypatch.delenv('PINATA_API_KEY', raising=False)
    monkeypatch.delenv('PINATA_SECRET_KEY', raising=False)
    service = IPFSService()

    assert not service.configured
    assert not service.test_connection()
    with pytest.raises(AppError) as exc_info:
        service.upload_metadata({'name': 'x'})
    assert exc_info.value.code is ErrorCode.IPFS_UPLOAD_FAILED


def test_pinata_error_status(service, monkeypatch):
    monkeypatch.setattr(ipfs_service.requests, 'post',
                        lambda url, **kw: FakeResponse(status_code=401, text='unauthorized'))

    with pytest.raises(AppError) as exc_info:
        service.upload_metadata({'name': 'x'})
    assert exc_info.value.code is ErrorCode.IPFS_UPLOAD_FAILED
    assert '401' in exc_info.value.details


def test_network_failure_maps_to_network_error(service, monkeypatch):
    def fail(url, **kwargs):
        raise requests.ConnectionError('connection refused')

    monkeypatch.setattr(ipfs_service.requests, 'post', fail)

    with pytest.raises(AppError) as exc_info:
        service.upload_metadata({'name': 'x'})
    assert exc_info.value.code is ErrorCode.NETWORK_ERROR


def test_upload_token_metadata_pins_image_then_document(service, posts):
    params = TokenDeployParams(
        name='My Token',
        symbol='MTK',
        decimals=7,
        initial_supply='1000000',
        admin_wallet=WALLET_ADDRESS,
        metadata=TokenMetadata(description='A test token', image=mock_file()),
    )

    result = service.upload_token_metadata(params)

    assert result.image_cid == 'Qm1'
    assert result.metadata_cid == 'Qm2'
    assert result.metadata_uri == 'ipfs://Qm2'
    assert result.gateway_url == 'https://gateway.pinata.cloud/ipfs/Qm2'

    document = posts[1][1]['json']['pinataContent']
    assert document == {
        'name': 'My Token',
        'symbol': 'MTK',
        'decimals': 7,
        'description': 'A test token',
        'image': 'ipfs://Qm1',
    }


def test_upload_token_metadata_reuses_pinned_image(service, posts):
    params = TokenDeployParams(
        name='My Token',
        symbol='MTK',
        decimals=7,
        initial_supply='1',
        admin_wallet=WALLET_ADDRESS,
        metadata=TokenMetadata(image_cid='QmExisting'),
    )

    result = service.upload_token_metadata(params)

    assert len(posts) == 1
    assert result.image_cid == 'QmExisting'
    assert posts[0][1]['json']['pinataContent']['image'] == 'ipfs://QmExisting'


def test_unpin(service, monkeypatch):
    deleted = []

    def fake_delete(url, **kwargs):
        deleted.append(url)
        return FakeResponse(status_code=200)

    monkeypatch.setattr(ipfs_service.requests, 'delete', fake_delete)

    assert service.unpin('QmABC')
    assert deleted == ['https://api.pinata.cloud/pinning/unpin/QmABC']


def test_connection_check(service, monkeypatch):
    monkeypatch.setattr(ipfs_service.requests, 'get', lambda url, **kw: FakeResponse(status_code=200))
    assert service.test_connection()

    monkeypatch.setattr(ipfs_service.requests, 'get', lambda url, **kw: FakeResponse(status_code=401))
    assert not service.test_connection()


def test_upload_image_from_url(service, posts):
    async def image(request):
        return web.Response(body=b'\x89PNG fake', content_type='image/png')

    app = web.Application()
    app.router.add_get('/cat.png', image)

    async def run():
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            return await service.upload_image_from_url(str(server.make_url('/cat.png')))
        finally:
            await server.close()

    assert asyncio.run(run()) == 'Qm1'
    assert posts[0][1]['files']['file'][0] == 'cat.png'
    assert posts[0][1]['files']['file'][2] == 'image/png'


def test_upload_image_from_url_download_failure(service, posts):
    app = web.Application()

    async def run():
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            return await service.upload_image_from_url(str(server.make_url('/missing.png')))
        finally:
            await server.close()

    with pytest.raises(AppError) as exc_info:
        asyncio.run(run())
    assert exc_info.value.code is ErrorCode.IPFS_UPLOAD_FAILED
    assert posts == []

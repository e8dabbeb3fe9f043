"""
IPFS service for uploading token images and metadata through Pinata
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Optional
from io import BytesIO

import aiohttp
import requests

from nova_launch.config import IPFS_CONFIG
from nova_launch.models import ImageFile, TokenDeployParams
from nova_launch.utils.errors import AppError, ErrorCode, to_app_error
from nova_launch.utils.validation import is_valid_image_file


@dataclass
class IPFSUploadResult:
    """CIDs produced when pinning a token's metadata"""
    metadata_cid: str
    metadata_uri: str  # ipfs://<cid>
    gateway_url: str
    image_cid: Optional[str] = None


class IPFSService:
    """Service for handling IPFS uploads"""

    def __init__(self, api_key: Optional[str] = None, secret_key: Optional[str] = None,
                 timeout: float = 30.0):
        """Initialize IPFS service with API keys (falls back to environment)"""
        self.pinata_api_key = api_key or os.getenv('PINATA_API_KEY')
        self.pinata_secret_key = secret_key or os.getenv('PINATA_SECRET_KEY')
        self.api_url = IPFS_CONFIG['pinata_api_url']
        self.gateway = IPFS_CONFIG['pinata_gateway']
        self.timeout = timeout
        self.logger = logging.getLogger('nova_launch')

    @property
    def configured(self) -> bool:
        return bool(self.pinata_api_key and self.pinata_secret_key)

    def _headers(self) -> Dict[str, str]:
        if not self.configured:
            raise AppError(ErrorCode.IPFS_UPLOAD_FAILED, 'Pinata API keys not configured')
        return {
            "pinata_api_key": self.pinata_api_key,
            "pinata_secret_api_key": self.pinata_secret_key
        }

    def gateway_url(self, cid: str) -> str:
        return f"{self.gateway}/{cid}"

    def _pin(self, endpoint: str, **kwargs) -> str:
        """POST to a Pinata pinning endpoint and return the IpfsHash"""
        url = f"{self.api_url}/pinning/{endpoint}"
        try:
            response = requests.post(url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            self.logger.error(f"Pinata request failed: {e}")
            raise to_app_error(e, default=ErrorCode.IPFS_UPLOAD_FAILED) from e

        if response.status_code != 200:
            self.logger.error(f"Pinata upload failed ({response.status_code}): {response.text}")
            raise AppError(ErrorCode.IPFS_UPLOAD_FAILED, f"Pinata returned {response.status_code}")

        ipfs_hash = response.json()['IpfsHash']
        self.logger.info(f"Pinned to IPFS: {ipfs_hash}")
        return ipfs_hash

    def upload_image(self, image: ImageFile) -> str:
        """Upload an image file to IPFS and return its CID"""
        result = is_valid_image_file(image)
        if not result.valid:
            raise AppError(ErrorCode.INVALID_INPUT, result.error)

        files = {
            'file': (image.name, BytesIO(image.data), image.content_type)
        }
        return self._pin('pinFileToIPFS', files=files)

    async def upload_image_from_url(self, image_url: str) -> str:
        """Download an image from a URL and upload it to IPFS"""
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.get(image_url) as response:
                    if response.status != 200:
                        self.logger.error(f"Failed to download image: {response.status}")
                        raise AppError(ErrorCode.IPFS_UPLOAD_FAILED,
                                       f"Image download returned {response.status}")

                    image_data = await response.read()
                    content_type = response.headers.get('Content-Type', 'image/jpeg').split(';')[0]
        except aiohttp.ClientError as e:
            self.logger.error(f"Error downloading image {image_url}: {e}")
            raise to_app_error(e, default=ErrorCode.IPFS_UPLOAD_FAILED) from e

        name = image_url.rstrip('/').rsplit('/', 1)[-1] or 'image'
        return self.upload_image(ImageFile(name=name, content_type=content_type, data=image_data))

    def upload_metadata(self, metadata: Dict) -> str:
        """Upload metadata JSON to IPFS and return its CID"""
        return self._pin('pinJSONToIPFS', json=metadata)

    def upload_token_metadata(self, params: TokenDeployParams) -> IPFSUploadResult:
        """Pin a token's image (if any) and metadata document"""
        metadata = params.metadata
        image_cid = metadata.image_cid if metadata else None
        if metadata and metadata.image is not None and image_cid is None:
            image_cid = self.upload_image(metadata.image)

        document = {
            'name': params.name,
            'symbol': params.symbol,
            'decimals': params.decimals,
            'description': metadata.description if metadata else None,
            'image': f"ipfs://{image_cid}" if image_cid else None,
        }
        metadata_cid = self.upload_metadata({
            'pinataContent': document,
            'pinataMetadata': {'name': f"{params.symbol}-metadata"},
        })

        return IPFSUploadResult(
            metadata_cid=metadata_cid,
            metadata_uri=f"ipfs://{metadata_cid}",
            gateway_url=self.gateway_url(metadata_cid),
            image_cid=image_cid,
        )

    def unpin(self, cid: str) -> bool:
        """Remove a pin; returns False if Pinata refused"""
        try:
            response = requests.delete(
                f"{self.api_url}/pinning/unpin/{cid}",
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Error unpinning {cid}: {e}")
            return False

        if response.status_code != 200:
            self.logger.warning(f"Unpin failed for {cid}: {response.text}")
            return False
        return True

    def test_connection(self) -> bool:
        """Check that the configured keys authenticate"""
        if not self.configured:
            return False
        try:
            response = requests.get(
                f"{self.api_url}/data/testAuthentication",
                headers=self._headers(),
                timeout=self.timeout,
            )
            return response.status_code == 200
        except requests.RequestException as e:
            self.logger.error(f"Pinata connection test failed: {e}")
            return False

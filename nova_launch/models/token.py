"""
Token deployment models
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

STROOPS_PER_XLM = 10_000_000


@dataclass(frozen=True)
class ImageFile:
    """An image selected for upload alongside a token"""
    name: str
    content_type: str  # MIME type, e.g. image/png
    data: bytes = b''
    declared_size: Optional[int] = None  # Size reported by the client when data isn't loaded

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ImageFile':
        """Build from a browser File-like dict ({name, type, size})"""
        content_type = data.get('type', data.get('contentType', data.get('content_type', '')))
        size = data.get('size')
        return cls(
            name=data.get('name', ''),
            content_type=content_type if isinstance(content_type, str) else '',
            declared_size=size if isinstance(size, (int, float)) and not isinstance(size, bool) else None,
        )


@dataclass(frozen=True)
class TokenMetadata:
    """Optional description and image attached to a deployment"""
    description: Optional[str] = None
    image: Optional[ImageFile] = None
    image_cid: Optional[str] = None  # Set once the image is pinned


@dataclass(frozen=True)
class TokenDeployParams:
    """Parameters collected from the deploy form

    Construction never validates; see nova_launch.utils.validation.
    """
    name: str
    symbol: str
    decimals: Any
    initial_supply: str  # Decimal string, arbitrary precision
    admin_wallet: str
    metadata: Optional[TokenMetadata] = None

    @property
    def has_metadata(self) -> bool:
        return self.metadata is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TokenDeployParams':
        """Build params from a JSON-style payload (camelCase or snake_case keys)"""
        metadata = data.get('metadata')
        if metadata is not None and not isinstance(metadata, TokenMetadata):
            image = metadata.get('image')
            if isinstance(image, Mapping):
                image = ImageFile.from_dict(image)
            metadata = TokenMetadata(
                description=metadata.get('description'),
                image=image,
                image_cid=metadata.get('imageCid', metadata.get('image_cid')),
            )

        return cls(
            name=data.get('name', ''),
            symbol=data.get('symbol', ''),
            decimals=data.get('decimals'),
            initial_supply=data.get('initialSupply', data.get('initial_supply', '')),
            admin_wallet=data.get('adminWallet', data.get('admin_wallet', '')),
            metadata=metadata,
        )


@dataclass(frozen=True)
class Fee:
    """Deployment fee in XLM"""
    base_fee: int
    metadata_fee: int
    total_fee: int

    @property
    def total_stroops(self) -> int:
        return self.total_fee * STROOPS_PER_XLM

    def to_dict(self) -> Dict[str, int]:
        return {
            'baseFee': self.base_fee,
            'metadataFee': self.metadata_fee,
            'totalFee': self.total_fee,
        }


@dataclass
class ValidationResult:
    """Outcome of validating a full parameter set"""
    valid: bool
    errors: Dict[str, str] = field(default_factory=dict)  # Failing fields only


@dataclass
class FileValidationResult:
    """Outcome of validating a single uploaded file"""
    valid: bool
    error: Optional[str] = None


@dataclass
class DeploymentResult:
    """Result reported after a deployment is submitted"""
    token_address: str
    transaction_hash: str
    total_fee: str
    timestamp: int  # Epoch milliseconds

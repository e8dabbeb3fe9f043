from .token import (
    ImageFile,
    TokenMetadata,
    TokenDeployParams,
    Fee,
    ValidationResult,
    FileValidationResult,
    DeploymentResult,
)
from .events import TokenEvent, WebhookSubscription, EVENT_TYPES

__all__ = [
    'ImageFile',
    'TokenMetadata',
    'TokenDeployParams',
    'Fee',
    'ValidationResult',
    'FileValidationResult',
    'DeploymentResult',
    'TokenEvent',
    'WebhookSubscription',
    'EVENT_TYPES',
]

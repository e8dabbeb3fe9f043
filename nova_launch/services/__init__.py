from .ipfs_service import IPFSService, IPFSUploadResult
from .soroban_rpc import SorobanRPC

__all__ = ['IPFSService', 'IPFSUploadResult', 'SorobanRPC']

"""
Error codes and user-facing messages
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional

import aiohttp
import requests


class ErrorCode(str, Enum):
    WALLET_NOT_CONNECTED = 'WALLET_NOT_CONNECTED'
    INSUFFICIENT_BALANCE = 'INSUFFICIENT_BALANCE'
    INVALID_INPUT = 'INVALID_INPUT'
    IPFS_UPLOAD_FAILED = 'IPFS_UPLOAD_FAILED'
    TRANSACTION_FAILED = 'TRANSACTION_FAILED'
    WALLET_REJECTED = 'WALLET_REJECTED'
    NETWORK_ERROR = 'NETWORK_ERROR'


ERROR_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.WALLET_NOT_CONNECTED: 'Please connect your wallet to continue',
    ErrorCode.INSUFFICIENT_BALANCE: 'Insufficient XLM balance for transaction fees',
    ErrorCode.INVALID_INPUT: 'Please check your input and try again',
    ErrorCode.IPFS_UPLOAD_FAILED: 'Failed to upload image to IPFS. Please try again',
    ErrorCode.TRANSACTION_FAILED: 'Transaction failed. Please try again',
    ErrorCode.WALLET_REJECTED: 'Transaction was cancelled',
    ErrorCode.NETWORK_ERROR: 'Network error. Please check your connection',
}

UNKNOWN_ERROR_MESSAGE = 'An unknown error occurred'

# Phrases collaborators use when the user declines or funds run short
_REJECTION_HINTS = ('rejected', 'declined', 'cancelled', 'canceled', 'denied')
_BALANCE_HINTS = ('insufficient', 'underfunded')


class AppError(Exception):
    """An error with a fixed user-facing message"""

    def __init__(self, code: ErrorCode, details: Optional[str] = None):
        self.code = ErrorCode(code)
        self.message = ERROR_MESSAGES[self.code]
        self.details = details
        super().__init__(self.display_message)

    @property
    def display_message(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        data = {'code': self.code.value, 'message': self.message}
        if self.details:
            data['details'] = self.details
        return data


def create_error(code: ErrorCode, details: Optional[str] = None) -> AppError:
    return AppError(code, details)


def is_app_error(error: Any) -> bool:
    """True for anything shaped like an AppError (has code and message)"""
    if isinstance(error, AppError):
        return True
    if isinstance(error, Mapping):
        return 'code' in error and 'message' in error
    return hasattr(error, 'code') and hasattr(error, 'message')


def get_error_message(error: Any) -> str:
    """Best-effort text for showing any caught value to the user"""
    if is_app_error(error):
        if isinstance(error, Mapping):
            message, details = error['message'], error.get('details')
        else:
            message, details = error.message, getattr(error, 'details', None)
        return f"{message}: {details}" if details else str(message)
    if isinstance(error, BaseException):
        return str(error)
    if isinstance(error, str):
        return error
    return UNKNOWN_ERROR_MESSAGE


def to_app_error(error: BaseException, default: ErrorCode = ErrorCode.TRANSACTION_FAILED) -> AppError:
    """Classify a collaborator failure into one of the fixed error codes"""
    if isinstance(error, AppError):
        return error

    details = str(error) or error.__class__.__name__

    if isinstance(error, (requests.ConnectionError, requests.Timeout,
                          aiohttp.ClientConnectionError, TimeoutError)):
        return AppError(ErrorCode.NETWORK_ERROR, details)

    lowered = details.lower()
    if any(hint in lowered for hint in _REJECTION_HINTS):
        return AppError(ErrorCode.WALLET_REJECTED, details)
    if any(hint in lowered for hint in _BALANCE_HINTS):
        return AppError(ErrorCode.INSUFFICIENT_BALANCE, details)

    if isinstance(error, ValueError):
        return AppError(ErrorCode.INVALID_INPUT, details)

    return AppError(default, details)

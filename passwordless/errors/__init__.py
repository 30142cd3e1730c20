"""
Error types and error codes for passwordless token authentication.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes surfaced across the package boundary."""

    # Verification outcomes
    TOKEN_NOT_FOUND = "token_not_found"
    TOKEN_NOT_VALID = "token_not_valid"
    INVALID_ENVELOPE = "invalid_envelope"

    # Strategy resolution
    UNKNOWN_STRATEGY = "unknown_strategy"
    NOT_VALID_FOR_CONTEXT = "not_valid_for_context"

    # Missing request capabilities
    MISSING_RESPONSE_SINK = "missing_response_sink"
    MISSING_REQUEST_SOURCE = "missing_request_source"

    # Generation and hashing
    ENTROPY_UNAVAILABLE = "entropy_unavailable"
    ALPHABET_TOO_LARGE = "alphabet_too_large"
    HASH_FAILURE = "hash_failure"

    # Lifecycle
    STORE_CLOSED = "store_closed"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    POST_VERIFY_FAILED = "post_verify_failed"
    CONFIGURATION_ERROR = "configuration_error"

    def __str__(self) -> str:
        return self.value


class PasswordlessError(Exception):
    """Base exception for all passwordless errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.TOKEN_NOT_VALID,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details,
        }
        if self.__cause__ is not None:
            result['cause'] = str(self.__cause__)
        return result

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class TokenNotFoundError(PasswordlessError):
    """No live token exists for the uid (absent and expired look the same)."""

    def __init__(self, message: str = "the token does not exist", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.TOKEN_NOT_FOUND, details)


class TokenNotValidError(PasswordlessError):
    """A token is present but cannot be accepted."""

    def __init__(
        self,
        message: str = "the token is incorrect",
        error_code: ErrorCode = ErrorCode.TOKEN_NOT_VALID,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class InvalidEnvelopeError(TokenNotValidError):
    """A sealed envelope failed authentication, decryption or decoding."""

    def __init__(self, message: str = "the token envelope is invalid", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_ENVELOPE, details)


class UnknownStrategyError(PasswordlessError):
    """No strategy is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"unknown strategy '{name}'", ErrorCode.UNKNOWN_STRATEGY, {'strategy': name})
        self.name = name


class NotValidForContextError(PasswordlessError):
    """The strategy exists but rejected the current request context."""

    def __init__(self, name: str):
        super().__init__(
            f"strategy '{name}' not valid for context",
            ErrorCode.NOT_VALID_FOR_CONTEXT,
            {'strategy': name},
        )
        self.name = name


class MissingResponseSinkError(PasswordlessError):
    """The request context carries no response sink."""

    def __init__(self, message: str = "context does not contain a response sink"):
        super().__init__(message, ErrorCode.MISSING_RESPONSE_SINK)


class MissingRequestSourceError(PasswordlessError):
    """The request context carries no request source."""

    def __init__(self, message: str = "context does not contain a request source"):
        super().__init__(message, ErrorCode.MISSING_REQUEST_SOURCE)


class EntropyError(PasswordlessError):
    """The secure random source could not provide bytes."""

    def __init__(self, message: str = "secure random source unavailable"):
        super().__init__(message, ErrorCode.ENTROPY_UNAVAILABLE)


class AlphabetTooLargeError(PasswordlessError):
    """Alphabets must be indexable by a single byte."""

    def __init__(self, size: int):
        super().__init__(
            f"alphabet of {size} symbols exceeds the 256 symbol limit",
            ErrorCode.ALPHABET_TOO_LARGE,
            {'size': size},
        )
        self.size = size


class TokenHashError(PasswordlessError):
    """Hashing or hash comparison failed for a systemic reason."""

    def __init__(self, message: str = "token hashing failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.HASH_FAILURE, details)


class StoreClosedError(PasswordlessError):
    """The store has been closed and can no longer be used."""

    def __init__(self, message: str = "token store is closed"):
        super().__init__(message, ErrorCode.STORE_CLOSED)


class DeadlineExceededError(PasswordlessError):
    """The caller-supplied deadline passed before the operation completed."""

    def __init__(self, message: str = "deadline exceeded"):
        super().__init__(message, ErrorCode.DEADLINE_EXCEEDED)


class PostVerifyError(PasswordlessError):
    """
    A post-verification action failed.

    The verification result computed before the chain ran is kept in
    ``valid`` and the failing action's exception in ``__cause__``.
    """

    def __init__(self, valid: bool, action: Any, cause: BaseException):
        super().__init__(
            f"post-verify action {action!r} failed: {cause}",
            ErrorCode.POST_VERIFY_FAILED,
            {'valid': valid},
        )
        self.valid = valid
        self.action = action


class ConfigurationError(PasswordlessError):
    """Raised when there's a configuration error."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR)
        self.config_key = config_key
        if config_key:
            self.details['config_key'] = config_key


__all__ = [
    'ErrorCode',
    'PasswordlessError',
    'TokenNotFoundError',
    'TokenNotValidError',
    'InvalidEnvelopeError',
    'UnknownStrategyError',
    'NotValidForContextError',
    'MissingResponseSinkError',
    'MissingRequestSourceError',
    'EntropyError',
    'AlphabetTooLargeError',
    'TokenHashError',
    'StoreClosedError',
    'DeadlineExceededError',
    'PostVerifyError',
    'ConfigurationError',
]

"""
Exception hierarchy for the ECPay e-Invoice SDK.

Every error carries a stable ``code`` for programmatic handling and an
``is_retryable`` hint for callers deciding on their own recovery. The runtime
does not consult ``is_retryable``; it classifies HTTP outcomes itself.
"""
from __future__ import annotations

from typing import Any, Optional


class EcPayError(Exception):
    """Base class for all SDK errors."""

    def __init__(self, message: str, code: str = "ECPAY_ERROR", is_retryable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.is_retryable = is_retryable

    @property
    def message(self) -> str:
        return str(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={str(self)!r})"


class EcPayApiError(EcPayError):
    """
    The API answered, but with a business-level failure (``RtnCode != 1``).

    Raised by ``EcPayResponse.raise_for_rtn_code()``.
    """

    def __init__(
        self,
        message: str,
        rtn_code: int,
        rtn_msg: str,
        *,
        trans_code: Optional[int] = None,
        trans_msg: Optional[str] = None,
        raw_response: Any = None,
    ) -> None:
        super().__init__(message, "ECPAY_API_ERROR", False)
        self.rtn_code = rtn_code
        self.rtn_msg = rtn_msg
        self.trans_code = trans_code
        self.trans_msg = trans_msg
        self.raw_response = raw_response


class EcPayValidationError(EcPayError, ValueError):
    """A command rejected its input before any network call."""

    def __init__(self, message: str, field: Optional[str] = None, details: Any = None) -> None:
        super().__init__(message, "ECPAY_VALIDATION_ERROR", False)
        self.field = field
        self.details = details


class EcPayNetworkError(EcPayError):
    """Non-2xx response after retries, or a transport error that is not a timeout."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[BaseException] = None,
        *,
        response_body: Optional[str] = None,
        is_retryable: bool = True,
    ) -> None:
        super().__init__(message, "ECPAY_NETWORK_ERROR", is_retryable)
        self.status_code = status_code
        self.original_error = original_error
        self.response_body = response_body


class EcPayEncryptionError(EcPayError):
    """Cipher construction, encryption or decryption failed."""

    def __init__(self, message: str, code: str = "ECPAY_ENCRYPTION_ERROR") -> None:
        super().__init__(message, code, False)


class EcPayPayloadError(EcPayEncryptionError):
    """A payload could not be encoded, or wire data could not be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "ECPAY_PAYLOAD_ERROR")


class EcPayTimeoutError(EcPayError):
    """Every attempt exceeded the configured timeout."""

    def __init__(self, message: str, timeout_ms: float) -> None:
        super().__init__(message, "ECPAY_TIMEOUT_ERROR", True)
        self.timeout_ms = timeout_ms


class EcPayInvalidArgumentsError(EcPayError, TypeError):
    """``send()`` got neither a command nor a path."""

    def __init__(self, message: str = "Invalid arguments to send()") -> None:
        super().__init__(message, "INVALID_ARGUMENTS", False)

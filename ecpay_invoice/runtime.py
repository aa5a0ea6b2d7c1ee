"""
EcPay Runtime: envelope building, encryption and HTTP transport with
exponential back-off.
"""
from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests
from requests import RequestException, Response

from ecpay_invoice.errors import EcPayEncryptionError, EcPayNetworkError, EcPayTimeoutError
from ecpay_invoice.services.cipher import CipherService
from ecpay_invoice.services.encoder import PayloadEncoder

logger = logging.getLogger(__name__)

__version__ = "1.0.0"

DEFAULT_RETRYABLE_STATUSES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """When and how long to wait before re-sending a request."""

    max_retries: int = 3
    retry_delay_ms: float = 1000
    backoff_multiplier: float = 2
    retryable_status_codes: frozenset[int] = DEFAULT_RETRYABLE_STATUSES

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay_ms < 0:
            raise ValueError(f"retry_delay_ms must be >= 0, got {self.retry_delay_ms}")
        # Accept any iterable of ints from callers.
        object.__setattr__(self, "retryable_status_codes", frozenset(self.retryable_status_codes))

    def delay_ms(self, attempt: int) -> float:
        """Back-off before re-sending after 0-indexed ``attempt`` failed."""
        return self.retry_delay_ms * math.pow(self.backoff_multiplier, attempt)


@dataclass
class EcPayConfig:
    """Configuration for the ECPay HTTP client."""

    server_url: str
    hash_key: str
    hash_iv: str
    merchant_id: str
    timeout_ms: float = 30000
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    headers: Dict[str, str] = field(default_factory=dict)
    debug: bool = False

    def __post_init__(self) -> None:
        self.server_url = self.server_url.rstrip("/")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be > 0, got {self.timeout_ms}")


def _backoff_sleep(attempt: int, policy: RetryPolicy, log: logging.Logger = logger) -> None:
    """
    Sleep for ``retry_delay_ms * backoff_multiplier ** attempt`` milliseconds.

    No jitter: the schedule is deterministic.
    """
    delay_ms = policy.delay_ms(attempt)
    log.warning(
        "[EcPay] Request failed, retrying in %dms (attempt %d/%d)",
        delay_ms, attempt + 1, policy.max_retries,
    )
    time.sleep(delay_ms / 1000.0)


class EcPayRuntime:
    """
    Low-level HTTP client for the ECPay e-Invoice API.

    Responsibilities:
    - Wraps the command data in the ``MerchantID`` / ``RqHeader`` / ``Data``
      envelope and encrypts ``Data``.
    - POSTs it and retries timeouts and retryable statuses with exponential
      back-off.
    - Raises EcPayTimeoutError / EcPayNetworkError once retries run out.
    - Decrypts the response ``Data`` field in place.

    An injected ``session`` is used as-is: headers and timeout are passed per
    request and the session object is never modified.
    """

    def __init__(
        self,
        config: EcPayConfig,
        session: Optional[requests.Session] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._encoder = PayloadEncoder(CipherService(config.hash_key, config.hash_iv))
        self._session = session if session is not None else requests.Session()
        self._log = log or logger
        self._headers = {
            "Content-Type": "application/json",
            "User-Agent": f"EcPay-Invoice-Python-SDK/{__version__}",
            **config.headers,
        }

    @property
    def config(self) -> EcPayConfig:
        return self._config

    @property
    def encoder(self) -> PayloadEncoder:
        return self._encoder

    @property
    def debug(self) -> bool:
        return self._config.debug

    def build_envelope(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Wrap business data in the request envelope with a fresh timestamp."""
        return {
            "MerchantID": self._config.merchant_id,
            "RqHeader": {"Timestamp": int(time.time())},
            "Data": {"MerchantID": self._config.merchant_id, **data},
        }

    def request(self, path: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Encrypt ``data``, POST it to ``path`` and return the decoded response body.

        Args:
            path: Endpoint path relative to ``server_url`` (e.g. "/B2CInvoice/Issue").
            data: Wire-keyed business fields for the ``Data`` section.

        Returns:
            Response body with ``Data`` decrypted and parsed (when present).

        Raises:
            EcPayEncryptionError: the request could not be encrypted or the
                response ``Data`` could not be decrypted.
            EcPayTimeoutError: every attempt timed out.
            EcPayNetworkError: non-2xx response after retries, or a
                non-timeout transport failure.
        """
        url = f"{self._config.server_url}{path}"
        encoded = self._encoder.encode_payload(self.build_envelope(data))
        serialised_body = json.dumps(encoded)
        policy = self._config.retry
        timeout_s = self._config.timeout_ms / 1000.0

        self._log.debug("[EcPay] Sending request to %s", path)

        for attempt in range(policy.max_retries + 1):
            self._log_request(attempt, url, encoded)
            retries_left = attempt < policy.max_retries

            try:
                response = self._session.post(
                    url, data=serialised_body, headers=self._headers, timeout=timeout_s
                )
            except requests.Timeout as exc:
                if retries_left:
                    _backoff_sleep(attempt, policy, self._log)
                    continue
                self._log.error("[EcPay] %s timed out after %d attempt(s)", path, attempt + 1)
                raise EcPayTimeoutError(
                    f"Request timed out after {self._config.timeout_ms}ms", self._config.timeout_ms
                ) from exc
            except RequestException as exc:
                # Connection refused, DNS, TLS ... not retried.
                self._log.error("[EcPay] Network error on %s: %s", path, exc)
                raise EcPayNetworkError(str(exc), None, exc) from exc

            status = response.status_code
            if 200 <= status < 300:
                return self._handle_response(response, path)

            retryable = status in policy.retryable_status_codes
            if retryable and retries_left:
                _backoff_sleep(attempt, policy, self._log)
                continue

            self._log.error("[EcPay] HTTP %d from %s (attempt %d)", status, path, attempt + 1)
            raise EcPayNetworkError(
                f"API Error: {status} {response.text}",
                status,
                response_body=response.text,
                is_retryable=retryable,
            )

        # The loop always returns or raises on its final attempt.
        raise AssertionError("unreachable")

    def _handle_response(self, response: Response, path: str) -> Dict[str, Any]:
        """Parse the 2xx body and decrypt its ``Data`` field in place."""
        try:
            body = response.json()
        except ValueError as exc:
            raise EcPayNetworkError(
                f"Invalid JSON response: {response.status_code} {response.text}",
                response.status_code,
                exc,
                response_body=response.text,
                is_retryable=False,
            ) from exc
        if not isinstance(body, dict):
            raise EcPayNetworkError(
                f"Unexpected response body: {response.status_code} {response.text}",
                response.status_code,
                response_body=response.text,
                is_retryable=False,
            )

        self._log.debug("[EcPay] Received response from %s (RtnCode=%s)", path, body.get("RtnCode"))
        if self.debug:
            self._log.debug("[EcPay] Response: %s", json.dumps(body, indent=2))

        if body.get("Data"):
            try:
                body["Data"] = self._encoder.decode_data(body["Data"])
            except EcPayEncryptionError as exc:
                # Not retried: the same request is expected to yield the same bytes.
                raise EcPayEncryptionError(f"Failed to decrypt response: {exc}") from exc
        return body

    def _log_request(self, attempt: int, url: str, body: Mapping[str, Any]) -> None:
        if not self.debug:
            return
        self._log.debug(
            "[EcPay] HTTP Request (attempt %d/%d): POST %s",
            attempt + 1, self._config.retry.max_retries + 1, url,
        )
        if attempt == 0:
            self._log.debug("[EcPay] Body: %s", json.dumps(body, indent=2))

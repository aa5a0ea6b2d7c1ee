"""
PayloadEncoder: converts the envelope ``Data`` field to and from ECPay's wire form.

Encoding (request side):
    JSON  ->  percent-encode  ->  AES-128-CBC  ->  Base64

The percent-encoding reproduces PHP's ``urlencode`` as ECPay expects it:
the ``encodeURIComponent`` unreserved set, except that a space becomes ``+``
and ``~`` / ``'`` are escaped as ``%7E`` / ``%27``. This is not
``application/x-www-form-urlencoded`` (``!*()`` stay literal) and must not be
swapped for ``urllib.parse.quote_plus``.

Decoding (response side) runs the same steps in reverse.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, unquote

from ecpay_invoice.errors import EcPayEncryptionError, EcPayPayloadError
from ecpay_invoice.services.cipher import CipherService

# Characters encodeURIComponent leaves alone on top of quote()'s
# always-safe set (letters, digits, "_.-~"). "'" is left out on purpose.
_SAFE_CHARS = "!*()"

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def url_encode(text: str) -> str:
    """Percent-encode ``text`` the way the ECPay server's decoder expects."""
    return quote(text, safe=_SAFE_CHARS).replace("%20", "+").replace("~", "%7E")


def url_decode(text: str) -> str:
    """
    Reverse :func:`url_encode`; ``+`` is read as a space.

    Raises:
        ValueError: a ``%`` not followed by two hex digits, or escapes that
            are not valid UTF-8.
    """
    match = _MALFORMED_ESCAPE.search(text)
    if match:
        raise ValueError(f"Malformed percent-escape at position {match.start()}")
    return unquote(text.replace("+", "%20"), errors="strict")


class PayloadEncoder:
    """
    Wraps a :class:`CipherService` to build and read encrypted envelopes.

    Args:
        cipher_service: A ready cipher. Takes precedence over the key strings.
        hash_key:       Merchant HashKey, used when no cipher is given.
        hash_iv:        Merchant HashIV, used when no cipher is given.
    """

    def __init__(
        self,
        cipher_service: Optional[CipherService] = None,
        hash_key: Optional[str] = None,
        hash_iv: Optional[str] = None,
    ) -> None:
        if cipher_service is not None:
            self._cipher = cipher_service
        elif hash_key and hash_iv:
            self._cipher = CipherService(hash_key, hash_iv)
        else:
            raise EcPayPayloadError("Must provide CipherService or HashKey/HashIV")

    def encode_payload(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Return a copy of ``payload`` whose ``Data`` is the encrypted wire string.

        Raises:
            EcPayPayloadError: ``Data`` is missing/None or not JSON-serialisable.
            EcPayEncryptionError: the cipher failed.
        """
        if payload.get("Data") is None:
            raise EcPayPayloadError("Payload missing Data field")

        try:
            json_data = json.dumps(
                payload["Data"], separators=(",", ":"), ensure_ascii=False, allow_nan=False
            )
            encoded = url_encode(json_data)
        except (TypeError, ValueError) as exc:
            raise EcPayPayloadError(f"Failed to encode data: {exc}") from exc

        return {**payload, "Data": self._cipher.encrypt(encoded)}

    def decode_data(self, encrypted_data: str) -> Any:
        """
        Decrypt and parse a wire ``Data`` string.

        Crypto failures and malformed JSON both surface as
        :class:`EcPayPayloadError`; the underlying exception is kept as
        ``__cause__``.
        """
        try:
            decrypted = self._cipher.decrypt(encrypted_data)
            return json.loads(url_decode(decrypted))
        except (EcPayEncryptionError, ValueError) as exc:
            raise EcPayPayloadError(f"Failed to decode data: {exc}") from exc

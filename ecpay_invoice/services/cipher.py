"""
CipherService: AES-128-CBC with PKCS7 padding.

Wire format:
    Base64( AES-128-CBC( PKCS7(plaintext UTF-8) ) )

Key material:
    HashKey and HashIV are the two 16-character secrets issued by ECPay.
    Both are reused for every message; the remote service decrypts with the
    same fixed pair, so the IV is not randomised.
"""
from __future__ import annotations

import base64
import binascii

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ecpay_invoice.errors import EcPayEncryptionError

BLOCK_SIZE_BITS = 128
KEY_SIZE_BYTES = 16


class CipherService:
    """
    Symmetric encrypt/decrypt primitive keyed by the merchant HashKey/HashIV.

    Usage::

        svc = CipherService("ejCk326UnaZWKisg", "q9jcZX8Ib9LM8wYk")
        token = svc.encrypt("hello")
        assert svc.decrypt(token) == "hello"
    """

    def __init__(self, hash_key: str, hash_iv: str) -> None:
        if not hash_key:
            raise EcPayEncryptionError("HashKey cannot be empty")
        if not hash_iv:
            raise EcPayEncryptionError("HashIV cannot be empty")

        self._key: bytes = hash_key.encode("utf-8")
        self._iv: bytes = hash_iv.encode("utf-8")

        if len(self._key) != KEY_SIZE_BYTES:
            raise EcPayEncryptionError(f"HashKey must be {KEY_SIZE_BYTES} bytes, got {len(self._key)}")
        if len(self._iv) != KEY_SIZE_BYTES:
            raise EcPayEncryptionError(f"HashIV must be {KEY_SIZE_BYTES} bytes, got {len(self._iv)}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encrypt(self, data: str) -> str:
        """
        Encrypt a UTF-8 string.

        Returns:
            Base64-encoded ciphertext.
        """
        try:
            padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
            padded = padder.update(data.encode("utf-8")) + padder.finalize()

            encryptor = self._cipher().encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()
        except (TypeError, ValueError, AttributeError) as exc:
            raise EcPayEncryptionError(f"Encryption failed: {exc}") from exc

        return base64.b64encode(ciphertext).decode("ascii")

    def decrypt(self, data: str) -> str:
        """
        Decrypt a Base64 ciphertext produced by :meth:`encrypt` (or by ECPay).

        Raises:
            EcPayEncryptionError: empty input, invalid Base64, wrong key,
                truncated ciphertext or bad padding.
        """
        if not data:
            raise EcPayEncryptionError("Data cannot be empty")

        try:
            ciphertext = base64.b64decode(data, validate=True)

            decryptor = self._cipher().decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except (binascii.Error, TypeError, ValueError) as exc:
            raise EcPayEncryptionError(f"Decryption failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cipher(self) -> Cipher:
        # A fresh context per call; Cipher contexts are single-use.
        return Cipher(algorithms.AES(self._key), modes.CBC(self._iv))

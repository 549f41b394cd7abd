"""AES-256-GCM helpers for encrypted puzzle files.

Payload format: base64(nonce[12] || ciphertext || tag[16]).
"""

import base64
import hashlib
import os
import re

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12
KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


class DecryptionError(Exception):
    """Raised when a payload cannot be decrypted with the given key."""


def clean_key(key: str) -> str:
    """Strip all whitespace from a hex key."""
    return re.sub(r"\s", "", key)


def is_valid_key(key: str) -> bool:
    """Return True for a 256-bit key written as 64 hex characters."""
    return bool(KEY_PATTERN.match(clean_key(key)))


def generate_key() -> str:
    return AESGCM.generate_key(bit_length=256).hex()


def encrypt_content(plaintext: str, key_hex: str) -> str:
    """Encrypt text into the base64 payload format."""
    aesgcm = AESGCM(bytes.fromhex(clean_key(key_hex)))
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decrypt_content(payload: str, key_hex: str) -> str:
    """Decrypt a base64 payload.

    Raises:
        DecryptionError: If the key is wrong or the payload is corrupted.
    """
    try:
        data = base64.b64decode(payload.strip(), validate=False)
        nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
        aesgcm = AESGCM(bytes.fromhex(clean_key(key_hex)))
        return aesgcm.decrypt(nonce, ciphertext, None).decode("utf-8")
    except (InvalidTag, ValueError, UnicodeDecodeError) as e:
        raise DecryptionError(str(e) or type(e).__name__) from e


def hash_password(password: str) -> str:
    """MD5 hex digest used by simulated account records."""
    return hashlib.md5(password.encode("utf-8")).hexdigest()

"""Password hashing with scrypt (cryptography's KDF).

Stored form: ``scrypt$<salt b64url>$<hash b64url>``.
"""

import base64
from os import urandom

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
KEY_LEN = 32
SALT_LEN = 16

_SCHEME = "scrypt"


def _kdf(salt: bytes) -> Scrypt:
    return Scrypt(salt=salt, length=KEY_LEN, n=SCRYPT_N, r=SCRYPT_R, p=SCRYPT_P)


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def hash_password(password: str) -> str:
    salt = urandom(SALT_LEN)
    derived = _kdf(salt).derive(password.encode("utf-8"))
    return f"{_SCHEME}${_b64(salt)}${_b64(derived)}"


def verify_password(password: str, stored: str) -> bool:
    """Check a plain password against a stored hash; malformed hashes never match."""
    try:
        scheme, salt_b64, hash_b64 = stored.split("$")
    except (AttributeError, ValueError):
        return False
    if scheme != _SCHEME:
        return False

    try:
        _kdf(_unb64(salt_b64)).verify(password.encode("utf-8"), _unb64(hash_b64))
    except InvalidKey:
        return False
    return True

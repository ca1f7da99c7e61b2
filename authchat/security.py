from __future__ import annotations

import base64
import secrets

import bcrypt
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

SCRYPT_N = 2**14
SCRYPT_R = 8
SCRYPT_P = 1
SALT_LENGTH = 16
KEY_LENGTH = 32
SCHEME = "scrypt"
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def _create_kdf(salt: bytes, n: int, r: int, p: int) -> Scrypt:
    return Scrypt(salt=salt, length=KEY_LENGTH, n=n, r=r, p=p)


def hash_password(password: str, n: int = SCRYPT_N) -> str:
    """
    Hash password with a fresh random salt.

    The result is ``scrypt$n$r$p$salt$key`` with salt and key in urlsafe
    base64, so the work factor travels with the stored hash.
    """
    salt = secrets.token_bytes(SALT_LENGTH)
    key = _create_kdf(salt, n, SCRYPT_R, SCRYPT_P).derive(password.encode())

    return "$".join(
        (
            SCHEME,
            str(n),
            str(SCRYPT_R),
            str(SCRYPT_P),
            base64.urlsafe_b64encode(salt).decode(),
            base64.urlsafe_b64encode(key).decode(),
        ),
    )


def _verify_bcrypt(password: str, password_hash: str) -> bool:
    # $2y$ is the PHP spelling of $2b$
    if password_hash.startswith("$2y$"):
        password_hash = "$2b$" + password_hash.removeprefix("$2y$")

    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check password against a stored hash.

    Accepts the scrypt format written by :func:`hash_password` and the bcrypt
    hashes left by accounts registered before scrypt. Malformed hashes never
    match.
    """
    if password_hash.startswith(BCRYPT_PREFIXES):
        return _verify_bcrypt(password, password_hash)

    try:
        scheme, n, r, p, salt, key = password_hash.split("$")
    except ValueError:
        return False

    if scheme != SCHEME:
        return False

    try:
        kdf = _create_kdf(base64.urlsafe_b64decode(salt), int(n), int(r), int(p))
        expected = base64.urlsafe_b64decode(key)
    except ValueError:
        return False

    try:
        kdf.verify(password.encode(), expected)
    except InvalidKey:
        return False

    return True

# app/utils/password_hash.py
"""
bcrypt password hashing for user accounts.

Usage:
    from app.utils.password_hash import hash_password, verify_password

    hashed = hash_password("s3cret-pass")
    verify_password("s3cret-pass", hashed)  # True
"""
import bcrypt
import logging

logger = logging.getLogger(__name__)


def hash_password(plaintext: str) -> str:
    """
    Hashes a password with a freshly generated bcrypt salt.

    Returns the 60-character hash as a UTF-8 string for storage in the user document.
    """
    if not plaintext:
        raise ValueError("Cannot hash empty password")

    hashed_bytes = bcrypt.hashpw(plaintext.encode('utf-8'), bcrypt.gensalt())
    return hashed_bytes.decode('utf-8')


def verify_password(plaintext: str, password_hash: str) -> bool:
    """Checks ``plaintext`` against a stored bcrypt hash. Malformed hashes verify as False."""
    if not plaintext or not password_hash:
        logger.warning("Attempted to verify with empty password or hash")
        return False

    try:
        return bcrypt.checkpw(plaintext.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError as e:
        logger.error(f"Error verifying password hash: {e}")
        return False

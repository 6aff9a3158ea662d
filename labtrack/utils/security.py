# labtrack/utils/security.py
"""Salted password hashing for the passwords table."""

from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # Unknown/garbled hash format in an old row
        return False

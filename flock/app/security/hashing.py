# flock/app/security/hashing.py
"""
Password hashing salted with the user id.

The id is known before the row is written (allocated up front), so the
hash can be computed ahead of the first save.

A single SHA-256 round over id and password is kept so existing stored
hashes stay valid. It is not a password-stretching hash such as bcrypt or
scrypt and offers little resistance to offline guessing.
"""
import hashlib
import secrets


def get_password_hash(password: str, user_id: int) -> str:
    """
    Returns:
        Hex-encoded SHA-256 of the id followed by the password
    """
    return hashlib.sha256(f"{user_id}{password}".encode("utf-8")).hexdigest()


def verify_password(password: str, user_id: int, hashed_password: str) -> bool:
    """Constant-time comparison against the stored hash."""
    return secrets.compare_digest(get_password_hash(password, user_id), hashed_password)


def gravatar_url(email: str) -> str:
    """Placeholder avatar derived from the email, like Gravatar expects it."""
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"http://www.gravatar.com/avatar/{digest}?d=wavatar"

# nextai/utils/password_util.py
from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    # Salted scrypt hash; the plaintext is never stored
    return generate_password_hash(password)


def check_password(password: str, password_hash: str) -> bool:
    if not isinstance(password, str) or not password or not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except (ValueError, TypeError):
        return False

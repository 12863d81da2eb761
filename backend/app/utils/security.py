from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError

from app.utils.hashing import sha256_text

ph = PasswordHasher(time_cost=3, memory_cost=65536, parallelism=4)


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(stored_hash: str, password: str) -> bool:
    try:
        return ph.verify(stored_hash, password)
    except VerifyMismatchError:
        return False


def advert_token(site_name: str, password_digest: str) -> str:
    return sha256_text(site_name + password_digest)

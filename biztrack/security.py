import secrets
from typing import Optional

import bcrypt

from biztrack.core.config import settings


def hash_password(pw: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw.encode("utf-8"), salt).decode("utf-8")


def verify_password(pw: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw((pw or "").encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed hash
        return False


def new_id() -> str:
    return secrets.token_hex(8)

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from app.core.config import SUPABASE_JWT_SECRET, JWT_AUDIENCE

ALGORITHM = "HS256"


class InvalidToken(Exception):
    pass


def create_token(subject: str, expires_minutes: int = 60, role: str = "authenticated") -> str:
    """Sign a token shaped like the ones Supabase Auth issues (local tooling and tests)."""
    expires = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode = {"sub": subject, "exp": expires, "aud": JWT_AUDIENCE, "role": role}
    return jwt.encode(to_encode, SUPABASE_JWT_SECRET, algorithm=ALGORITHM)


def decode_token(token: str, secret: Optional[str] = None) -> dict:
    try:
        return jwt.decode(token, secret or SUPABASE_JWT_SECRET, algorithms=[ALGORITHM], audience=JWT_AUDIENCE)
    except JWTError as e:
        raise InvalidToken(str(e)) from e

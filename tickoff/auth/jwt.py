"""Signed session tokens for tickoff.

A token's subject is the user id; it expires after JWT_EXPIRATION_HOURS.
Sign-out is client-side: tokens are not tracked by the server.
"""

import os
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from dotenv import load_dotenv

load_dotenv()

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

TOKEN_TYPE = "session"


def create_access_token(user_id: str, now: Optional[datetime] = None) -> str:
    """Sign a session token for user_id."""
    issued = now or datetime.utcnow()
    claims: Dict[str, Any] = {
        "sub": user_id,
        "typ": TOKEN_TYPE,
        "iat": issued,
        "exp": issued + timedelta(hours=JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def get_user_id_from_token(token: str) -> Optional[str]:
    """User id carried by a valid session token.

    Returns None for expired, tampered, malformed or foreign tokens.
    """
    try:
        claims = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    if claims.get("typ") != TOKEN_TYPE:
        return None
    return claims.get("sub")

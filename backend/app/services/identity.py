"""
Caller identity from Supabase access tokens.
"""

from typing import Optional

import jwt

from app.exceptions import Unauthorized
from app.utils.logger import get_logger

logger = get_logger(__name__)


class IdentityResolver:
    """Verifies ``Authorization: Bearer <token>`` headers and returns the user id."""

    def __init__(self, secret: str, audience: str = "authenticated") -> None:
        self.secret = secret
        self.audience = audience

    def resolve(self, authorization: Optional[str]) -> str:
        if not authorization:
            raise Unauthorized("User not authenticated")

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthorized("Authorization header must be in format: Bearer <token>")
        if not self.secret:
            # Without a secret no token can be trusted
            logger.error("SUPABASE_JWT_SECRET is not configured; rejecting request")
            raise Unauthorized("User not authenticated")

        try:
            payload = jwt.decode(
                token.strip(),
                self.secret,
                algorithms=["HS256"],
                audience=self.audience,
                options={"verify_exp": True},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token expired")
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", e)
            raise Unauthorized("Invalid token")

        user_id = payload.get("sub")
        if not user_id:
            raise Unauthorized("Token has no subject")
        return str(user_id)

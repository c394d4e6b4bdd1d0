"""
Authentication - single-user login and JWT bearer tokens
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

from .config import Settings, settings
from .errors import AuthenticationError, TokenError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=8)).decode("utf-8")


class Authenticator:
    """
    Checks the configured login and issues/verifies signed tokens.
    Tokens carry ``{id, email}`` and expire after a fixed lifetime.
    """

    def __init__(
        self,
        email: str,
        password_hash: str,
        secret_key: str,
        user_id: int = 1,
        algorithm: str = "HS256",
        expire_hours: int = 24
    ):
        self.email = email
        self.password_hash = password_hash
        self.secret_key = secret_key
        self.user_id = user_id
        self.algorithm = algorithm
        self.expire_hours = expire_hours

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "Authenticator":
        """
        Build an authenticator from settings.

        AUTH_PASSWORD_HASH is used as-is; otherwise AUTH_PASSWORD is hashed.
        With neither set, no password will match.
        """
        config = config or settings
        password_hash = config.AUTH_PASSWORD_HASH
        if not password_hash:
            if config.AUTH_PASSWORD:
                password_hash = hash_password(config.AUTH_PASSWORD)
            else:
                logger.warning("No login password configured; all logins will be rejected")
                password_hash = ""

        return cls(
            email=config.AUTH_EMAIL,
            password_hash=password_hash,
            secret_key=config.JWT_SECRET_KEY,
            user_id=config.AUTH_USER_ID,
            algorithm=config.JWT_ALGORITHM,
            expire_hours=config.TOKEN_EXPIRE_HOURS,
        )

    def login(self, email: Optional[str], password: Optional[str]) -> str:
        """
        Check credentials and return a token.

        Raises:
            AuthenticationError: "Invalid email" or "Invalid password"
        """
        if email != self.email:
            raise AuthenticationError("Invalid email")

        if not password or not self._check_password(password):
            raise AuthenticationError("Invalid password")

        return self.create_token()

    def _check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))
        except ValueError:
            logger.error("Configured password hash is not a valid bcrypt hash")
            return False

    def create_token(self) -> str:
        """Sign a token for the configured user."""
        payload = {
            "id": self.user_id,
            "email": self.email,
            "exp": self.token_expiry(),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def token_expiry(self) -> datetime:
        return datetime.now(timezone.utc) + timedelta(hours=self.expire_hours)

    def verify_token(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Decode and validate a token.

        Raises:
            TokenError: 401 when the token is missing, 403 when invalid or expired
        """
        if not token:
            raise TokenError("Missing token", status_code=401)

        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            raise TokenError(f"Invalid token: {e}", status_code=403) from e


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None

import hmac
import secrets
from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer


SESSION_SALT = "bunkopdf-admin-session"


class SessionNotConfigured(Exception):
    pass


class AdminSessionService:
    """Single shared-secret admin login backed by a signed cookie token."""

    def __init__(self, secret_key, username, password, max_age=60 * 60 * 24):
        self.username = username
        self.password = password
        self.max_age = max_age
        self._serializer = URLSafeTimedSerializer(secret_key, salt=SESSION_SALT)

    @classmethod
    def from_config(cls, config):
        return cls(
            config["SECRET_KEY"],
            config.get("ADMIN_USERNAME"),
            config.get("ADMIN_PASSWORD"),
            max_age=config.get("ADMIN_SESSION_MAX_AGE", 60 * 60 * 24),
        )

    def login(self, username, password) -> Optional[str]:
        if not self.username or not self.password:
            raise SessionNotConfigured("Admin credentials not configured")
        if not isinstance(username, str) or not isinstance(password, str):
            return None
        user_ok = hmac.compare_digest(username.encode(), self.username.encode())
        password_ok = hmac.compare_digest(password.encode(), self.password.encode())
        if not (user_ok and password_ok):
            return None
        return self._serializer.dumps({"u": username, "n": secrets.token_urlsafe(8)})

    def check(self, token) -> bool:
        if not token:
            return False
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except BadSignature:
            return False
        return isinstance(data, dict) and data.get("u") == self.username

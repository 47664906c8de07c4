import logging
from typing import Optional

import requests


logger = logging.getLogger(__name__)

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


class CaptchaError(Exception):
    pass


class TurnstileVerifier:
    def __init__(
        self,
        secret_key: Optional[str],
        verify_url: str = TURNSTILE_VERIFY_URL,
        timeout: float = 10,
    ):
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            config.get("TURNSTILE_SECRET_KEY"),
            verify_url=config.get("TURNSTILE_VERIFY_URL", TURNSTILE_VERIFY_URL),
            timeout=config.get("REQUEST_TIMEOUT", 10),
        )

    def _siteverify(self, token: str) -> dict:
        try:
            response = requests.post(
                self.verify_url,
                json={"secret": self.secret_key, "response": token},
                timeout=self.timeout,
            )
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise CaptchaError(f"Turnstile verification request failed: {exc}") from exc

    def verify(self, token: str) -> bool:
        if not self.secret_key:
            logger.error("Turnstile secret key not configured")
            return False
        try:
            data = self._siteverify(token)
        except CaptchaError as exc:
            logger.error("%s", exc)
            return False
        if data.get("success") is not True:
            logger.info("Turnstile rejected token: %s", data.get("error-codes"))
            return False
        return True

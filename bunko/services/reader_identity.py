import uuid
from typing import Optional, Tuple

from itsdangerous import BadSignature, URLSafeSerializer


READER_SALT = "bunkopdf-reader"


class ReaderIdentity:
    """Anonymous per-browser id carried in a signed, long-lived cookie."""

    def __init__(self, secret_key):
        self._serializer = URLSafeSerializer(secret_key, salt=READER_SALT)

    @classmethod
    def from_config(cls, config):
        return cls(config["SECRET_KEY"])

    def issue(self) -> Tuple[str, str]:
        reader_id = uuid.uuid4().hex
        return reader_id, self._serializer.dumps(reader_id)

    def resolve(self, token) -> Optional[str]:
        if not token:
            return None
        try:
            reader_id = self._serializer.loads(token)
        except BadSignature:
            return None
        if not isinstance(reader_id, str) or not reader_id:
            return None
        return reader_id

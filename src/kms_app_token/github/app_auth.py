"""JWT приложения GitHub, подписанный удалённым ключом.

Приватный ключ никогда не покидает KMS: локально собираются только
заголовок и claims, в KMS уходит SHA-256 дайджест signing input.
"""

import base64
import hashlib
import json
import time
from dataclasses import dataclass
from typing import Callable

from kms_app_token.errors import ConfigurationError, SigningError

JWT_HEADER = {"alg": "RS256", "typ": "JWT"}

# JWT живёт только на время одного обмена токена.
JWT_LIFETIME_SECONDS = 30


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _encode_json(obj: dict) -> str:
    return b64url(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


@dataclass(frozen=True)
class JwtClaims:
    issuer: str
    issued_at: int

    @property
    def expires_at(self) -> int:
        return self.issued_at + JWT_LIFETIME_SECONDS

    def to_dict(self) -> dict:
        return {"iss": self.issuer, "iat": self.issued_at, "exp": self.expires_at}


class AppJwtBuilder:
    def __init__(self, app_id: str, clock: Callable[[], float] = time.time):
        if not app_id or not app_id.strip():
            raise ConfigurationError("app_id must be a non-empty string")
        self.app_id = app_id
        self.clock = clock

    def claims(self) -> JwtClaims:
        return JwtClaims(issuer=self.app_id, issued_at=int(self.clock()))

    @staticmethod
    def build_signing_input(claims: JwtClaims, header: dict | None = None) -> bytes:
        if header is None:
            header = JWT_HEADER
        return f"{_encode_json(header)}.{_encode_json(claims.to_dict())}".encode("ascii")

    @staticmethod
    def digest(signing_input: bytes) -> bytes:
        return hashlib.sha256(signing_input).digest()

    @staticmethod
    def assemble(signing_input: bytes, signature: bytes | None) -> str:
        if not signature:
            raise SigningError("KMS did not return a valid signature")
        return f"{signing_input.decode('ascii')}.{b64url(signature)}"

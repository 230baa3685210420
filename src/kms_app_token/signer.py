from typing import Protocol

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import kms

from kms_app_token.errors import SigningError


class AsymmetricSigner(Protocol):
    async def sign(self, digest: bytes, key_version_name: str) -> bytes: ...


class KmsSigner:
    """Подпись SHA-256 дайджеста ключом Cloud KMS (RSA_SIGN_PKCS1_*_SHA256)."""

    def __init__(self, client: kms.KeyManagementServiceAsyncClient):
        self.client = client

    async def sign(self, digest: bytes, key_version_name: str) -> bytes:
        try:
            response = await self.client.asymmetric_sign(
                request={"name": key_version_name, "digest": {"sha256": digest}}
            )
        except (GoogleAPIError, GoogleAuthError) as e:
            raise SigningError(f"KMS asymmetric sign failed for {key_version_name}") from e

        if not response.signature:
            raise SigningError("KMS did not return a valid signature")
        return response.signature

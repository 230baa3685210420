import json
from typing import Annotated

from google.cloud import kms
from pydantic import AnyHttpUrl, Field, TypeAdapter, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from kms_app_token.errors import ConfigurationError
from kms_app_token.github.installation import InstallationTarget

DEFAULT_GITHUB_API_URL = "https://api.github.com"

_http_url = TypeAdapter(AnyHttpUrl)


class Settings(BaseSettings):
    """Входные параметры action: INPUT_APP_ID, INPUT_GCP_KMS_KEY_RING и т.д."""

    model_config = SettingsConfigDict(
        env_prefix="INPUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    gcp_kms_project_id: str = Field(min_length=1)
    gcp_kms_location: str = Field(min_length=1)
    gcp_kms_key_ring: str = Field(min_length=1)
    gcp_kms_key_name: str = Field(min_length=1)
    gcp_kms_key_version: str = Field(min_length=1)

    app_id: str = Field(min_length=1)
    installation_id: int | None = Field(default=None, gt=0)
    permissions: Annotated[dict[str, str] | None, NoDecode] = None
    repository: str | None = None
    github_api_url: str = DEFAULT_GITHUB_API_URL

    @field_validator("app_id", "repository", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("permissions", mode="before")
    @classmethod
    def parse_permissions(cls, v):
        if not isinstance(v, str):
            return v
        if not v.strip():
            return None
        try:
            parsed = json.loads(v)
        except json.JSONDecodeError as e:
            raise ValueError(f"permissions must be a JSON object: {e.msg}") from e
        if not isinstance(parsed, dict):
            raise ValueError("permissions must be a JSON object")
        return parsed

    @field_validator("github_api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        try:
            _http_url.validate_python(v)
        except ValidationError as e:
            msg = e.errors()[0]["msg"]
            raise ValueError(f"github_api_url must be an http(s) URL: {msg}") from e
        return v.rstrip("/")

    @property
    def owner(self) -> str:
        return self._split_repository()[0]

    @property
    def repo(self) -> str:
        return self._split_repository()[1]

    def _split_repository(self) -> tuple[str, str]:
        parts = (self.repository or "").split("/")
        # "owner/name" ровно из двух частей, иначе считаем репозиторий не указанным
        if len(parts) != 2:
            return "", ""
        return parts[0], parts[1]

    def installation_target(self) -> InstallationTarget:
        return InstallationTarget(
            installation_id=self.installation_id,
            owner=self.owner,
            repo=self.repo,
        )

    def key_version_name(self) -> str:
        return kms.KeyManagementServiceClient.crypto_key_version_path(
            self.gcp_kms_project_id,
            self.gcp_kms_location,
            self.gcp_kms_key_ring,
            self.gcp_kms_key_name,
            self.gcp_kms_key_version,
        )


def load_settings(**overrides) -> Settings:
    """Явные значения (например, опции CLI) важнее переменных окружения."""
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid action inputs: {problems}") from e

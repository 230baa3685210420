import httpx
import pytest

from kms_app_token.github import AppJwtBuilder, GitHubAppClient, make_http_client

FIXED_NOW = 1_000_000_000
KEY_VERSION = "projects/p/locations/global/keyRings/r/cryptoKeys/k/cryptoKeyVersions/1"


class FakeSigner:
    def __init__(self, signature: bytes | None = b"S", error: Exception | None = None):
        self.signature = signature
        self.error = error
        self.calls = []

    async def sign(self, digest: bytes, key_version_name: str) -> bytes | None:
        self.calls.append((digest, key_version_name))
        if self.error:
            raise self.error
        return self.signature


class FakeGitHub:
    """GitHubAppClient поверх httpx.MockTransport, запоминает все запросы."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response], handler=None):
        self.routes = routes
        self.handler = handler
        self.requests: list[httpx.Request] = []
        http = make_http_client(
            "https://api.github.com/", transport=httpx.MockTransport(self._handle)
        )
        self.client = GitHubAppClient(http)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"message": "Not Found"})
        return self.routes[key]


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def builder():
    return AppJwtBuilder("1", clock=lambda: FIXED_NOW)


@pytest.fixture
def action_env(monkeypatch, tmp_path):
    """Обязательные INPUT_* переменные, без .env из рабочей директории."""
    monkeypatch.chdir(tmp_path)
    for name in ("INSTALLATION_ID", "REPOSITORY", "PERMISSIONS", "GITHUB_API_URL"):
        monkeypatch.delenv(f"INPUT_{name}", raising=False)
    values = {
        "INPUT_GCP_KMS_PROJECT_ID": "p",
        "INPUT_GCP_KMS_LOCATION": "global",
        "INPUT_GCP_KMS_KEY_RING": "r",
        "INPUT_GCP_KMS_KEY_NAME": "k",
        "INPUT_GCP_KMS_KEY_VERSION": "1",
        "INPUT_APP_ID": "1",
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return values

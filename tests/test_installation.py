import httpx
import pytest

from conftest import FakeGitHub
from kms_app_token.errors import ConfigurationError, ResolutionError
from kms_app_token.github import InstallationResolver, InstallationTarget

INSTALLATION_PATH = ("GET", "/repos/octo/demo/installation")


class TestInstallationTarget:
    def test_explicit(self):
        target = InstallationTarget(installation_id=5)
        assert target.is_explicit
        target.ensure_resolvable()

    def test_repository(self):
        target = InstallationTarget(owner="octo", repo="demo")
        assert not target.is_explicit
        assert target.full_name == "octo/demo"
        target.ensure_resolvable()

    @pytest.mark.parametrize(
        "owner,repo", [("", ""), ("octo", ""), ("", "demo")]
    )
    def test_missing_everything(self, owner, repo):
        with pytest.raises(ConfigurationError, match="installation_id or repository"):
            InstallationTarget(owner=owner, repo=repo).ensure_resolvable()

    @pytest.mark.parametrize(
        "owner,repo",
        [
            ("octo", "demo?x"),
            ("octo", "demo#x"),
            ("octo", "demo\n"),
            ("oc to", "demo"),
            ("octo", ".."),
            ("octo", "%2e%2e"),
        ],
    )
    def test_malformed_names(self, owner, repo):
        with pytest.raises(ConfigurationError, match="Invalid repository"):
            InstallationTarget(owner=owner, repo=repo).ensure_resolvable()

    def test_dotted_repository_name(self):
        InstallationTarget(owner="octo-org", repo="demo.github.io").ensure_resolvable()


class TestInstallationResolver:
    @pytest.mark.asyncio
    async def test_explicit_id_bypasses_lookup(self):
        github = FakeGitHub({})

        result = await InstallationResolver(github.client).resolve(
            InstallationTarget(installation_id=5), "jwt"
        )

        assert result == 5
        assert github.requests == []

    @pytest.mark.asyncio
    async def test_missing_target_fails_before_network(self):
        github = FakeGitHub({})

        with pytest.raises(ConfigurationError):
            await InstallationResolver(github.client).resolve(InstallationTarget(), "jwt")

        assert github.requests == []

    @pytest.mark.asyncio
    async def test_lookup_by_repository(self):
        github = FakeGitHub({INSTALLATION_PATH: httpx.Response(200, json={"id": 777})})

        result = await InstallationResolver(github.client).resolve(
            InstallationTarget(owner="octo", repo="demo"), "signed.jwt.value"
        )

        assert result == 777
        [request] = github.requests
        assert request.headers["Authorization"] == "Bearer signed.jwt.value"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"

    @pytest.mark.asyncio
    async def test_app_not_installed(self):
        github = FakeGitHub({})

        with pytest.raises(ResolutionError, match="Is the app installed") as exc_info:
            await InstallationResolver(github.client).resolve(
                InstallationTarget(owner="octo", repo="demo"), "jwt"
            )

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert exc_info.value.__cause__.response.status_code == 404

    @pytest.mark.asyncio
    async def test_response_without_id(self):
        github = FakeGitHub({INSTALLATION_PATH: httpx.Response(200, json={})})

        with pytest.raises(ResolutionError):
            await InstallationResolver(github.client).resolve(
                InstallationTarget(owner="octo", repo="demo"), "jwt"
            )

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        github = FakeGitHub({}, handler=fail)

        with pytest.raises(ResolutionError) as exc_info:
            await InstallationResolver(github.client).resolve(
                InstallationTarget(owner="octo", repo="demo"), "jwt"
            )

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("repo", ["demo?x", "demo#x"])
    async def test_query_characters_fail_before_network(self, repo):
        github = FakeGitHub({("GET", "/repos/octo/demo"): httpx.Response(200, json={"id": 99})})

        with pytest.raises(ConfigurationError):
            await InstallationResolver(github.client).resolve(
                InstallationTarget(owner="octo", repo=repo), "jwt"
            )

        assert github.requests == []


class TestGitHubAppClient:
    @pytest.mark.asyncio
    async def test_path_segments_are_escaped(self):
        github = FakeGitHub(
            {("GET", "/repos/octo/demo?x/installation"): httpx.Response(200, json={"id": 1})}
        )

        await github.client.get_repo_installation("jwt", "octo", "demo?x")

        [request] = github.requests
        assert request.url.raw_path == b"/repos/octo/demo%3Fx/installation"
        assert request.url.query == b""

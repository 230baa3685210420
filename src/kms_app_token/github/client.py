from urllib.parse import quote

import httpx

from kms_app_token import __version__

API_VERSION = "2022-11-28"
USER_AGENT = f"kms-app-token/{__version__}"


def make_http_client(api_url: str, **kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=api_url.rstrip("/"),
        headers={
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
            "User-Agent": USER_AGENT,
        },
        **kwargs,
    )


class GitHubAppClient:
    """Вызовы REST API от имени самого приложения (bearer = JWT)."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def get_repo_installation(self, jwt: str, owner: str, repo: str) -> dict:
        resp = await self.http.get(
            f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}/installation",
            headers=_bearer(jwt),
        )
        resp.raise_for_status()
        return resp.json()

    async def create_installation_access_token(
        self, jwt: str, installation_id: int, permissions: dict[str, str] | None = None
    ) -> dict:
        body = {}
        if permissions is not None:
            body["permissions"] = permissions
        resp = await self.http.post(
            f"/app/installations/{installation_id}/access_tokens",
            headers=_bearer(jwt),
            json=body,
        )
        resp.raise_for_status()
        return resp.json()


def _bearer(jwt: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {jwt}"}

import httpx

from kms_app_token.errors import ExchangeError
from kms_app_token.github.client import GitHubAppClient


class TokenExchangeClient:
    def __init__(self, github: GitHubAppClient):
        self.github = github

    async def exchange(
        self, jwt: str, installation_id: int, permissions: dict[str, str] | None = None
    ) -> str:
        """Обменять JWT на installation access token.

        Права не проверяются локально, их применяет GitHub.
        """
        try:
            data = await self.github.create_installation_access_token(
                jwt, installation_id, permissions
            )
            token = data["token"]
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise ExchangeError("Could not create installation access token.") from e

        if not isinstance(token, str) or not token:
            raise ExchangeError("Could not create installation access token.")
        return token

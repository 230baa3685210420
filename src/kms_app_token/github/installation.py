import re
from dataclasses import dataclass

import httpx

from kms_app_token.errors import ConfigurationError, ResolutionError
from kms_app_token.github.client import GitHubAppClient

# допустимые символы логина и имени репозитория на GitHub
NAME_RE = re.compile(r"[A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class InstallationTarget:
    """Либо явный installation id, либо пара owner/repo для его поиска."""

    installation_id: int | None = None
    owner: str = ""
    repo: str = ""

    @property
    def is_explicit(self) -> bool:
        return self.installation_id is not None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def ensure_resolvable(self) -> None:
        if self.is_explicit:
            return
        if not self.owner or not self.repo:
            raise ConfigurationError("Either installation_id or repository must be specified")
        for part in (self.owner, self.repo):
            if not NAME_RE.fullmatch(part) or part in (".", ".."):
                raise ConfigurationError(
                    f"Invalid repository '{self.full_name}', expected owner/name"
                )


class InstallationResolver:
    def __init__(self, github: GitHubAppClient):
        self.github = github

    async def resolve(self, target: InstallationTarget, jwt: str) -> int:
        target.ensure_resolvable()
        if target.is_explicit:
            return target.installation_id

        try:
            data = await self.github.get_repo_installation(jwt, target.owner, target.repo)
            return int(data["id"])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            raise ResolutionError(
                "Could not get repo installation. Is the app installed on this repo?"
            ) from e

import asyncio

import typer
from google.auth.exceptions import GoogleAuthError
from google.cloud import kms
from rich.console import Console
from rich.markup import escape

from kms_app_token.actions import ActionsEnvironment
from kms_app_token.config import Settings, load_settings
from kms_app_token.errors import SigningError, TokenIssueError, describe
from kms_app_token.github import AppJwtBuilder, GitHubAppClient, make_http_client
from kms_app_token.pipeline import TokenPipeline
from kms_app_token.signer import KmsSigner

app = typer.Typer(
    name="kms-app-token",
    help="Installation access token для GitHub App с ключом в Google Cloud KMS",
    add_completion=False,
)
console = Console()


async def issue_token(settings: Settings) -> str:
    target = settings.installation_target()
    # до создания клиентов: без цели не нужен ни KMS, ни GitHub
    target.ensure_resolvable()

    try:
        kms_client = kms.KeyManagementServiceAsyncClient()
    except GoogleAuthError as e:
        raise SigningError("Could not create KMS client") from e

    async with kms_client, make_http_client(settings.github_api_url) as http:
        pipeline = TokenPipeline(
            builder=AppJwtBuilder(settings.app_id),
            signer=KmsSigner(kms_client),
            github=GitHubAppClient(http),
            key_version_name=settings.key_version_name(),
        )
        return await pipeline.run(target, settings.permissions)


@app.command()
def run(
    app_id: str | None = typer.Option(None, "--app-id", help="ID GitHub App"),
    installation_id: int | None = typer.Option(None, "--installation-id", help="ID установки"),
    repository: str | None = typer.Option(None, "--repository", "-r", help="Репозиторий (owner/repo)"),
    permissions: str | None = typer.Option(None, "--permissions", help="JSON с правами токена"),
    github_api_url: str | None = typer.Option(None, "--github-api-url", help="Базовый URL GitHub API"),
    kms_project_id: str | None = typer.Option(None, "--kms-project-id"),
    kms_location: str | None = typer.Option(None, "--kms-location"),
    kms_key_ring: str | None = typer.Option(None, "--kms-key-ring"),
    kms_key_name: str | None = typer.Option(None, "--kms-key-name"),
    kms_key_version: str | None = typer.Option(None, "--kms-key-version"),
):
    """Выпустить installation access token. Параметры также читаются из INPUT_*."""
    env = ActionsEnvironment.from_env()

    try:
        settings = load_settings(
            app_id=app_id,
            installation_id=installation_id,
            repository=repository,
            permissions=permissions,
            github_api_url=github_api_url,
            gcp_kms_project_id=kms_project_id,
            gcp_kms_location=kms_location,
            gcp_kms_key_ring=kms_key_ring,
            gcp_kms_key_name=kms_key_name,
            gcp_kms_key_version=kms_key_version,
        )
        token = asyncio.run(issue_token(settings))
    except TokenIssueError as e:
        console.print(f"[red]Ошибка ({e.kind}): {escape(str(e))}[/red]")
        env.set_failed(describe(e))
        raise typer.Exit(1)

    env.set_secret(token)
    env.set_output("token", token)
    env.info("Token generated successfully!")


if __name__ == "__main__":
    app()

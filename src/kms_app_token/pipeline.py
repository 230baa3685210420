from enum import Enum

from rich.console import Console

from kms_app_token.github import (
    AppJwtBuilder,
    GitHubAppClient,
    InstallationResolver,
    InstallationTarget,
    TokenExchangeClient,
)
from kms_app_token.signer import AsymmetricSigner

console = Console()


class PipelineStage(str, Enum):
    START = "start"
    CLAIMS_BUILT = "claims_built"
    SIGNING_INPUT_COMPUTED = "signing_input_computed"
    SIGNED = "signed"
    BYPASSED = "bypassed"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    EXCHANGING = "exchanging"
    SUCCESS = "success"
    FAILURE = "failure"


class TokenPipeline:
    """claims -> signing input -> подпись KMS -> installation id -> токен.

    Каждый запуск одноразовый: после SUCCESS или FAILURE нужен новый объект.
    """

    def __init__(
        self,
        builder: AppJwtBuilder,
        signer: AsymmetricSigner,
        github: GitHubAppClient,
        key_version_name: str,
    ):
        self.builder = builder
        self.signer = signer
        self.key_version_name = key_version_name
        self.resolver = InstallationResolver(github)
        self.exchange_client = TokenExchangeClient(github)
        self.history: list[PipelineStage] = [PipelineStage.START]

    @property
    def stage(self) -> PipelineStage:
        return self.history[-1]

    def _advance(self, stage: PipelineStage):
        self.history.append(stage)

    async def run(
        self, target: InstallationTarget, permissions: dict[str, str] | None = None
    ) -> str:
        if self.stage is not PipelineStage.START:
            raise RuntimeError(f"Pipeline already finished in stage {self.stage.value}")

        try:
            token = await self._run(target, permissions)
        except Exception:
            self._advance(PipelineStage.FAILURE)
            raise

        self._advance(PipelineStage.SUCCESS)
        return token

    async def _run(self, target: InstallationTarget, permissions: dict[str, str] | None) -> str:
        target.ensure_resolvable()

        claims = self.builder.claims()
        self._advance(PipelineStage.CLAIMS_BUILT)

        signing_input = self.builder.build_signing_input(claims)
        self._advance(PipelineStage.SIGNING_INPUT_COMPUTED)

        console.print(f"[blue]Подписываю JWT ключом {self.key_version_name}...[/blue]")
        signature = await self.signer.sign(
            self.builder.digest(signing_input), self.key_version_name
        )
        jwt = self.builder.assemble(signing_input, signature)
        self._advance(PipelineStage.SIGNED)

        if target.is_explicit:
            installation_id = target.installation_id
            self._advance(PipelineStage.BYPASSED)
        else:
            self._advance(PipelineStage.RESOLVING)
            console.print(f"[blue]Ищу установку приложения в {target.full_name}...[/blue]")
            installation_id = await self.resolver.resolve(target, jwt)
            self._advance(PipelineStage.RESOLVED)

        self._advance(PipelineStage.EXCHANGING)
        console.print(f"[blue]Запрашиваю токен для установки {installation_id}...[/blue]")
        return await self.exchange_client.exchange(jwt, installation_id, permissions)

from kms_app_token.github.app_auth import AppJwtBuilder, JwtClaims
from kms_app_token.github.client import GitHubAppClient, make_http_client
from kms_app_token.github.installation import InstallationResolver, InstallationTarget
from kms_app_token.github.token_exchange import TokenExchangeClient

__all__ = [
    "AppJwtBuilder",
    "JwtClaims",
    "GitHubAppClient",
    "make_http_client",
    "InstallationResolver",
    "InstallationTarget",
    "TokenExchangeClient",
]

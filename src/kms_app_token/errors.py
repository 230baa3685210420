class TokenIssueError(Exception):
    """Base class for every failure of the token pipeline."""

    kind = "error"


class ConfigurationError(TokenIssueError):
    kind = "configuration"


class SigningError(TokenIssueError):
    kind = "signing"


class ResolutionError(TokenIssueError):
    kind = "resolution"


class ExchangeError(TokenIssueError):
    kind = "exchange"


def root_cause(exc: BaseException) -> BaseException:
    seen = {id(exc)}
    while exc.__cause__ is not None and id(exc.__cause__) not in seen:
        exc = exc.__cause__
        seen.add(id(exc))
    return exc


def describe(exc: BaseException) -> str:
    """Сообщение об ошибке вместе с самой глубокой причиной."""
    message = str(exc) or type(exc).__name__
    cause = root_cause(exc)
    if cause is exc:
        return message
    return f"{message}: {str(cause) or type(cause).__name__}"

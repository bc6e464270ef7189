class ScrobblerError(Exception):
    """Base class for every error the CLI maps to an exit code."""

    exit_code = 1


class ConfigurationError(ScrobblerError):
    exit_code = 3


class AuthenticationError(ScrobblerError):
    exit_code = 4


class NetworkError(ScrobblerError):
    exit_code = 5


class ProtocolError(ScrobblerError):
    exit_code = 6


class ApiError(ProtocolError):
    """Error reported by Last.fm itself (``{"error": code, "message": ...}``)."""

    def __init__(self, code: int, message: str):
        super().__init__(f"Last.fm API error {code}: {message}")
        self.code = code
        self.message = message


class NothingScrobbledError(ScrobblerError):
    exit_code = 7


# 4=auth failed, 9=invalid session key, 14=unauthorized token,
# 15=token expired, 26=suspended API key
AUTH_ERROR_CODES = frozenset({4, 9, 14, 15, 26})

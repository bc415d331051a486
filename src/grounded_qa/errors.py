"""Error taxonomy shared by the pipeline and the API layer."""


class ConfigError(Exception):
    """Invalid configuration or missing request input; surfaced as a client error."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidConfigError(ConfigError, ValueError):
    """Raised when chunking parameters cannot produce a terminating window."""


class CollaboratorUnavailableError(Exception):
    """Raised when an embedding, generation or store call fails."""

    def __init__(self, service: str, detail: str) -> None:
        self.service = service
        self.detail = detail
        super().__init__(f"{service} unavailable: {detail}")


class MalformedRouterOutputError(ValueError):
    """Router output was not a JSON object naming known agents."""

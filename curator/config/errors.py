"""Configuration error taxonomy."""


class ConfigurationError(Exception):
    """Raised when category, period or scoring configuration is unusable.

    Configuration errors are fatal: ranking never starts with a missing or
    malformed profile, and no default is substituted silently.
    """

    def __init__(
        self,
        message: str,
        errors: list[dict[str, str]] | None = None,
        source: str | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable summary.
            errors: Structured ``{loc, msg, type}`` details, if any.
            source: File or lookup that produced the error.
        """
        self.errors = errors or []
        self.source = source
        super().__init__(message)

"""Exception types raised across the package."""


class ReadMasterError(Exception):
    """Base class for all ReadMaster errors."""


class InvalidSourceConfigError(ReadMasterError, ValueError):
    """Source configuration failed its adapter's validation."""

    def __init__(self, source_type: str, config: dict = None):
        self.source_type = source_type
        self.config = config or {}
        super().__init__(f"Invalid configuration for source type '{source_type}'")


class UnsupportedSourceTypeError(ReadMasterError, LookupError):
    """No adapter is registered for a source type."""

    def __init__(self, source_type: str):
        self.source_type = source_type
        super().__init__(f"Unsupported source type: {source_type}")


class SourceNotFoundError(ReadMasterError, LookupError):
    """A source id does not resolve to a stored source."""

    def __init__(self, source_id: int):
        self.source_id = source_id
        super().__init__(f"Source not found: {source_id}")


class AnalysisError(ReadMasterError):
    """The analysis provider returned an error or an unusable response."""


class AnalysisConfigError(AnalysisError, ValueError):
    """The analysis provider is not configured (e.g. missing API key)."""

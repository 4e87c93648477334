"""Exceptions raised by api-doc-assembler."""


class AssemblerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(AssemblerError):
    """The configuration file is unreadable or invalid."""


class MetadataError(AssemblerError):
    """A metadata batch could not be loaded."""


class AssemblyError(AssemblerError):
    """Document assembly failed; no document is produced."""


class UnknownActionError(AssemblyError):
    """A route declares an HTTP action the document format cannot express."""

    def __init__(self, action: str, route_description: str = ""):
        self.action = action
        self.route_description = route_description
        super().__init__(f"Unknown route action encountered: {action!r}")


class EncodingError(AssemblerError):
    """The assembled document could not be serialized."""

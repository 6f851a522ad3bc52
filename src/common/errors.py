"""Error taxonomy for the version audit."""


class VersionsError(Exception):
    """Base class for every error raised by the audit."""


class DescriptorError(VersionsError):
    """A project descriptor exists but cannot be parsed."""


class VersionShapeError(VersionsError):
    """A project version does not have the ``#.#.#`` shape."""


class RegistryCheckError(VersionsError):
    """The registry could not answer an existence check."""


class ConfigError(VersionsError):
    """Configuration is missing or malformed; the run cannot continue."""

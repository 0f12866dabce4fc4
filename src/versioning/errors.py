"""Error kinds raised by version resolution and installation."""


class VersionManagerError(Exception):
    """Base class for every resolution/installation failure."""


class ParseError(VersionManagerError, ValueError):
    """Requested string is neither an exact version nor a constraint."""


class EmptyVersionError(VersionManagerError):
    """An install was attempted with an empty version string."""

    def __init__(self, message: str = "empty version"):
        super().__init__(message)


class NoCompatibleVersionError(VersionManagerError):
    """Local and/or remote search ended without a matching version."""

    def __init__(self, message: str = "no compatible version found"):
        super().__init__(message)


class NetworkError(VersionManagerError):
    """Release index could not be reached or returned unusable data."""


class DownloadError(NetworkError):
    """Archive download failed."""


class ExtractionError(VersionManagerError):
    """Downloaded archive could not be extracted."""

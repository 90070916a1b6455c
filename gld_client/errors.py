"""Error types raised inside the GLD trailer subsystem."""


class GldError(Exception):
    """Base class for all GLD client errors."""


class TruncatedError(GldError, ValueError):
    """Raised by ByteCursor when fewer bytes remain than a read requires."""


class RulesetParseError(GldError, ValueError):
    """Raised when a fetched GLD document cannot be turned into a ruleset."""

"""Exception types raised by the reviewer, the fixer and the loaders."""


class AipReviewerError(Exception):
    """Base class for all aip-reviewer errors."""


class SpecLoadError(AipReviewerError):
    """The API description could not be read or is not a mapping."""


class ConfigError(AipReviewerError):
    """A reviewer config file could not be read."""


class PointerError(AipReviewerError):
    """A structured pointer does not resolve against the document."""


class FixError(AipReviewerError):
    """A spec change cannot be applied to the working document."""

"""Exceptions raised by pykill."""


class PykillError(Exception):
    """Base class for pykill errors."""


class ProcessTableUnavailable(PykillError):
    """The process table could not be enumerated at all."""


class ConfigError(PykillError):
    """The configuration file is unreadable or holds invalid values."""

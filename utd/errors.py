"""Exception types raised by utd."""


class UtdError(Exception):
    """Base class for all utd errors."""


class IoError(UtdError):
    """The state file could not be opened, read, written or renamed."""


class ParseError(UtdError):
    """State file contents or an id argument could not be parsed."""


class ConfigError(UtdError):
    """The configuration file is malformed."""

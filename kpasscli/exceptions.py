"""Exception hierarchy for kpasscli.

Library code raises these; only the CLI maps them to messages and exit codes.
"""


class KpassError(Exception):
    """Base exception for kpasscli operations."""


class DatabaseNotFoundError(KpassError):
    """Raised when the KDBX database file does not exist."""


class AuthenticationError(KpassError):
    """Raised when database credentials are invalid."""


class ConfigError(KpassError):
    """Raised for unreadable configuration or unresolvable settings."""


class SearchError(KpassError):
    """Base exception for query resolution failures."""


class EmptyQueryError(SearchError):
    """Raised when an absolute path query has no segments to resolve."""


class InvalidSubpathError(SearchError):
    """Raised when a subpath query does not split into at least two segments."""


class PathSegmentNotFoundError(SearchError):
    """Raised when an intermediate segment of an absolute path does not exist."""


class EntryNotFoundError(SearchError):
    """Raised when the final segment of an absolute path resolves to nothing."""


class NotAGroupError(SearchError):
    """Raised when a node that must be a group (e.g. the root) is not one."""


class FieldNotFoundError(KpassError):
    """Raised when a requested field is not present on the resolved node."""


class OTPError(KpassError):
    """Raised when a one-time password cannot be generated."""


class OutputError(KpassError):
    """Raised when a value cannot be delivered to its output target."""

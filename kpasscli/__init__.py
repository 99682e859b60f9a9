"""kpasscli - look up KeePass entries from the command line.

Resolves absolute paths, partial paths and bare names against a KDBX
database opened with pykeepass, and extracts standard or custom fields
from the single matching entry.
"""

__version__ = "0.1.0"

from kpasscli.exceptions import (  # noqa: F401
    KpassError,
    DatabaseNotFoundError,
    AuthenticationError,
    ConfigError,
    SearchError,
    EmptyQueryError,
    InvalidSubpathError,
    PathSegmentNotFoundError,
    EntryNotFoundError,
    NotAGroupError,
    FieldNotFoundError,
    OTPError,
    OutputError,
)
from kpasscli.search import (  # noqa: F401
    Finder,
    NodeKind,
    SearchOptions,
    SearchResult,
    matches,
)
from kpasscli.fields import get_field_value, format_entry_details  # noqa: F401
from kpasscli.reader import open_database  # noqa: F401
from kpasscli.cli import main  # noqa: F401

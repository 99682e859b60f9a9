"""Field extraction for resolved search results.

The five standard KeePass fields are addressed case-insensitively
(``password``, ``PASSWORD`` and ``Password`` are the same field); any other
name is looked up verbatim among the entry's custom string fields, and then
among the string fields pykeepass keeps out of ``custom_properties``
(``otp`` and ``Tags``).
"""

from kpasscli.exceptions import FieldNotFoundError
from kpasscli.search import SearchResult

# Lowercased field name -> pykeepass Entry attribute
STANDARD_FIELDS = {
    "title": "title",
    "username": "username",
    "password": "password",
    "url": "url",
    "notes": "notes",
}


# Reserved KDBX string fields not exposed through custom_properties
RESERVED_FIELDS = {
    "otp": lambda entry: getattr(entry, "otp", None),
    "Tags": lambda entry: ";".join(getattr(entry, "tags", None) or []) or None,
}


def get_field_value(result: SearchResult, field_name: str) -> str:
    """Return the value of *field_name* on the entry behind *result*.

    An unset standard field yields an empty string.

    Raises:
        FieldNotFoundError: If *result* is a group, or the entry has no
            field called *field_name*.
    """
    if not result.is_entry:
        raise FieldNotFoundError(
            f"Field '{field_name}' not found: '{result.path}' is a group"
        )

    entry = result.node
    attr = STANDARD_FIELDS.get(field_name.lower())
    if attr is not None:
        return getattr(entry, attr) or ""

    value = (entry.custom_properties or {}).get(field_name)
    if value is None and field_name in RESERVED_FIELDS:
        value = RESERVED_FIELDS[field_name](entry)
    if value is None:
        raise FieldNotFoundError(f"Field '{field_name}' not found")
    return value


def _format_time(value) -> str:
    if value is None:
        return "-"
    return value.isoformat(sep=" ", timespec="seconds")


def format_entry_details(result: SearchResult) -> str:
    """Render a human-readable summary of an entry, without its password.

    Custom fields are listed by name only.
    """
    if not result.is_entry:
        raise FieldNotFoundError(f"'{result.path}' is a group, not an entry")

    entry = result.node
    rule = "-" * 40
    lines = [rule, "Entry Details:", rule, f"Path: {result.path}"]
    for label, attr in (
        ("Title", "title"),
        ("Username", "username"),
        ("URL", "url"),
        ("Notes", "notes"),
    ):
        value = getattr(entry, attr)
        if value:
            lines.append(f"{label}: {value}")

    custom = sorted(entry.custom_properties or {})
    if custom:
        lines.append(f"Custom fields: {', '.join(custom)}")
    if getattr(entry, "otp", None):
        lines.append("TOTP: configured")

    lines += [
        rule,
        "Metadata:",
        f"Created: {_format_time(getattr(entry, 'ctime', None))}",
        f"Modified: {_format_time(getattr(entry, 'mtime', None))}",
        f"Accessed: {_format_time(getattr(entry, 'atime', None))}",
    ]
    return "\n".join(lines)

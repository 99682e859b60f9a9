"""Shared fixtures: small in-memory trees shaped like pykeepass objects."""

from datetime import datetime, timezone

import pytest


class FakeEntry:
    """Stand-in for ``pykeepass.entry.Entry``."""

    def __init__(self, title, username=None, password=None, url=None,
                 notes=None, custom=None, otp=None):
        self.title = title
        self.username = username
        self.password = password
        self.url = url
        self.notes = notes
        self.custom_properties = dict(custom or {})
        self.otp = otp
        self.ctime = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        self.mtime = datetime(2024, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
        self.atime = None

    def __repr__(self):
        return f"FakeEntry({self.title!r})"


class FakeGroup:
    """Stand-in for ``pykeepass.group.Group``."""

    def __init__(self, name, subgroups=(), entries=()):
        self.name = name
        self.subgroups = list(subgroups)
        self.entries = list(entries)

    def __repr__(self):
        return f"FakeGroup({self.name!r})"


@pytest.fixture
def make_entry():
    return FakeEntry


@pytest.fixture
def make_group():
    return FakeGroup


@pytest.fixture
def tree():
    """A root group named "Root" laid out as:

    Root
    ├── root-entry
    ├── Shared              (entry)
    ├── Work/
    │   ├── server
    │   ├── Password1
    │   └── Servers/
    │       └── server
    ├── Personal/
    │   ├── MyPass
    │   ├── server
    │   └── Email/
    │       └── gmail
    └── Shared/             (group)
        └── wiki
    """
    return FakeGroup(
        "Root",
        subgroups=[
            FakeGroup(
                "Work",
                subgroups=[
                    FakeGroup("Servers", entries=[FakeEntry("server", password="deep")]),
                ],
                entries=[
                    FakeEntry(
                        "server",
                        username="alice",
                        password="s3rv3r",
                        url="https://work.example",
                        notes="rack 4",
                        custom={"API Key": "abc123"},
                    ),
                    FakeEntry("Password1", password="pw1"),
                ],
            ),
            FakeGroup(
                "Personal",
                subgroups=[
                    FakeGroup(
                        "Email",
                        entries=[
                            FakeEntry(
                                "gmail",
                                username="bob@example.com",
                                password="mail-pw",
                                otp="otpauth://totp/Example:bob?secret=JBSWY3DPEHPK3PXP&issuer=Example",
                            )
                        ],
                    ),
                ],
                entries=[
                    FakeEntry("MyPass", password="mine"),
                    FakeEntry("server", password="home"),
                ],
            ),
            FakeGroup("Shared", entries=[FakeEntry("wiki")]),
        ],
        entries=[
            FakeEntry("root-entry", password="top"),
            FakeEntry("Shared", password="shared-entry"),
        ],
    )


"""Query resolution over a KeePass group tree.

A query string is resolved in one of three ways, chosen by its shape:

  /Root/Work/server   absolute path, exact title descent from the root group
  Work/server         subpath, group/entry titles matched at any depth
  server              bare name, matched against every entry title

Nodes are read through the pykeepass object model (``Group.name``,
``Group.subgroups``, ``Group.entries`` and ``Entry.title``). Any object
exposing the same attributes works as a tree. A missing title is treated
as the empty string.

The resolver never short-circuits on the first hit (except for absolute
paths, which are single-result by construction); deciding what to do with
zero or several matches is left to the caller.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from kpasscli.exceptions import (
    EmptyQueryError,
    EntryNotFoundError,
    InvalidSubpathError,
    NotAGroupError,
    PathSegmentNotFoundError,
)

logger = logging.getLogger(__name__)

SEPARATOR = "/"


@dataclass(frozen=True)
class SearchOptions:
    """Comparison modes applied to every title match of one invocation."""

    case_sensitive: bool = False
    exact_match: bool = False


class NodeKind(enum.Enum):
    ENTRY = "entry"
    GROUP = "group"


@dataclass(frozen=True)
class SearchResult:
    """A matched node and the slash-delimited path that leads to it."""

    path: str
    node: Any
    kind: NodeKind = NodeKind.ENTRY

    @property
    def is_entry(self) -> bool:
        return self.kind is NodeKind.ENTRY


def matches(value: str, pattern: str, options: SearchOptions) -> bool:
    """Return True if *value* matches *pattern* under *options*.

    Without case sensitivity both strings are lowercased first. Exact mode
    compares for equality, otherwise *pattern* must be a substring of
    *value* (so an empty pattern matches everything).
    """
    if not options.case_sensitive:
        value = value.lower()
        pattern = pattern.lower()
    if options.exact_match:
        return value == pattern
    return pattern in value


def join_path(prefix: str, title: str) -> str:
    """Append *title* to *prefix*, leaving the prefix alone for empty titles."""
    if not title:
        return prefix
    return f"{prefix}{SEPARATOR}{title}"


def _group_title(group) -> str:
    return group.name or ""


def _entry_title(entry) -> str:
    return entry.title or ""


def _is_group(node) -> bool:
    return hasattr(node, "subgroups") and hasattr(node, "entries")


def _child_groups(group) -> list:
    return [child for child in group.subgroups if _is_group(child)]


def _node_key(result: SearchResult):
    # pykeepass hands out a fresh wrapper object per access, so identity
    # alone cannot tell two routes to the same entry apart.
    node_id = getattr(result.node, "uuid", None) or id(result.node)
    return result.path, node_id


class Finder:
    """Resolve query strings against the tree below *root*.

    Args:
        root: The root group, usually ``PyKeePass.root_group``.
        options: Matching modes for subpath and bare name queries.
            Absolute paths always compare titles exactly.
    """

    def __init__(self, root, options: Optional[SearchOptions] = None):
        self.root = root
        self.options = options or SearchOptions()

    def find(self, query: str) -> list[SearchResult]:
        """Return every node matching *query*, in tree order.

        Raises:
            SearchError: A subclass describing why the query is unusable.
        """
        if query.startswith(SEPARATOR):
            strategy = "absolute path"
            results = self._find_by_absolute_path(query)
        elif SEPARATOR in query:
            strategy = "subpath"
            results = self._find_by_subpath(query)
        else:
            strategy = "name"
            results = self._find_by_name(query)

        logger.debug(
            "Resolved %r by %s search: %d result(s)", query, strategy, len(results)
        )
        return results

    def _matches(self, value: str, pattern: str) -> bool:
        return matches(value, pattern, self.options)

    def _root_group(self):
        if not _is_group(self.root):
            raise NotAGroupError("Root is not a group")
        return self.root

    def _find_by_absolute_path(self, query: str) -> list[SearchResult]:
        root = self._root_group()

        remainder = query.lstrip(SEPARATOR)
        if not remainder:
            raise EmptyQueryError("Empty path")

        parts = remainder.split(SEPARATOR)
        # The root name is optional: "/Root/a/b" and "/a/b" are equivalent.
        if parts[0] == _group_title(root):
            parts = parts[1:]
        if not parts:
            raise EntryNotFoundError(f"Entry not found: {query}")

        current = root
        last = len(parts) - 1
        for index, part in enumerate(parts):
            # Entries win over groups of the same title at the final segment.
            if index == last:
                for entry in current.entries:
                    if _entry_title(entry) == part:
                        return [SearchResult(query, entry, NodeKind.ENTRY)]

            child = None
            for group in _child_groups(current):
                if _group_title(group) == part:
                    child = group
                    break

            if child is None:
                if index == last:
                    raise EntryNotFoundError(f"Entry not found: {query}")
                raise PathSegmentNotFoundError(f"Group not found: {part}")
            if index == last:
                return [SearchResult(query, child, NodeKind.GROUP)]
            current = child

        raise EntryNotFoundError(f"Entry not found: {query}")

    def _find_by_subpath(self, query: str) -> list[SearchResult]:
        parts = query.split(SEPARATOR)
        if len(parts) < 2:
            raise InvalidSubpathError(f"Invalid subpath query: {query}")

        target = parts[-1]
        root = self._root_group()

        # Depth-first over (group, parent path, unconsumed group patterns).
        # The walk over-collects; the containment filter below decides.
        collected: list[SearchResult] = []
        stack = [(root, "", tuple(parts[:-1]))]
        while stack:
            group, prefix, pending = stack.pop()
            title = _group_title(group)
            group_path = join_path(prefix, title)

            if len(pending) == 1:
                for entry in group.entries:
                    entry_title = _entry_title(entry)
                    if self._matches(entry_title, target):
                        collected.append(
                            SearchResult(join_path(group_path, entry_title), entry)
                        )

            children = _child_groups(group)
            work = []
            if pending and self._matches(title, pending[0]):
                work.extend((child, group_path, pending[1:]) for child in children)
            work.extend((child, group_path, pending) for child in children)
            stack.extend(reversed(work))

        results: list[SearchResult] = []
        seen = set()
        for result in collected:
            if query not in result.path:
                continue
            # Two routes to one entry yield the same path; report it once.
            key = _node_key(result)
            if key in seen:
                continue
            seen.add(key)
            results.append(result)
        return results

    def _find_by_name(self, query: str) -> list[SearchResult]:
        root = self._root_group()

        results: list[SearchResult] = []
        stack = [(root, "")]
        while stack:
            group, prefix = stack.pop()
            group_path = join_path(prefix, _group_title(group))

            for entry in group.entries:
                entry_title = _entry_title(entry)
                if self._matches(entry_title, query):
                    results.append(
                        SearchResult(join_path(group_path, entry_title), entry)
                    )

            stack.extend(
                (child, group_path) for child in reversed(_child_groups(group))
            )
        return results

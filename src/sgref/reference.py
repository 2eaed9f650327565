"""Reference: immutable, resolved pointer to a path at an exact commit."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sgref.serde import as_str_object_dict, optional_int, require_string
from sgref.settings import DEFAULT_HOST_ALIASES, DEFAULT_SERVICE_URL, SHORT_SCHEME

if TYPE_CHECKING:
    from sgref.sources import ContentSource

COMMIT_ID_LENGTH = 40
SHORT_COMMIT_LENGTH = 5

_FULL_COMMIT_ID = re.compile(rf"[0-9a-fA-F]{{{COMMIT_ID_LENGTH}}}")


def is_full_commit_id(revision: str) -> bool:
    """Return whether ``revision`` is already a full 40-character hexadecimal commit id."""
    return _FULL_COMMIT_ID.fullmatch(revision) is not None


def alias_remote(remote: str, host_aliases: Mapping[str, str] = DEFAULT_HOST_ALIASES) -> str:
    """Replace the host segment of ``remote`` with its alias, when one is known."""
    host, sep, rest = remote.partition("/")
    for alias, canonical in host_aliases.items():
        if canonical == host:
            return f"{alias}{sep}{rest}"
    return remote


@dataclass(frozen=True, slots=True)
class Reference:
    """A remote, a commit and a repository path, with an optional 1-based position.

    ``commit`` is a full commit id once the reference has gone through
    :func:`sgref.resolver.resolve_reference`; a reference built by hand may
    still hold a symbolic revision such as ``"HEAD"`` (see ``is_resolved``).
    """

    remote: str
    commit: str
    path: str = ""
    line: int | None = None
    col: int | None = None

    def __post_init__(self) -> None:
        """Validate the remote and position invariants."""
        if not self.remote:
            msg = "Reference.remote cannot be empty."
            raise ValueError(msg)
        if "//" in self.remote:
            msg = f"Reference.remote must not contain '//': {self.remote!r}."
            raise ValueError(msg)
        if not self.commit:
            msg = "Reference.commit cannot be empty."
            raise ValueError(msg)
        if self.col is not None and self.line is None:
            msg = "Reference.col requires Reference.line."
            raise ValueError(msg)
        for name, value in (("line", self.line), ("col", self.col)):
            if value is not None and value < 1:
                msg = f"Reference.{name} must be >= 1, got {value}."
                raise ValueError(msg)

    @property
    def is_resolved(self) -> bool:
        """Return whether ``commit`` is a full commit id."""
        return is_full_commit_id(self.commit)

    @property
    def short_commit(self) -> str:
        """Return the first five characters of the commit."""
        return self.commit[:SHORT_COMMIT_LENGTH]

    def short_display_name(self, *, host_aliases: Mapping[str, str] = DEFAULT_HOST_ALIASES) -> str:
        """Return a compact ``sg://gh/org/repo@abcde/-/path`` label.

        The label is a display hint, not a key: two references on the same
        remote and path whose commits share a five-character prefix get the
        same label.
        """
        remote = alias_remote(self.remote, host_aliases)
        return f"{SHORT_SCHEME}{remote}@{self.short_commit}/-/{self.path}"

    def canonical_web_url(self, *, service_url: str = DEFAULT_SERVICE_URL) -> str:
        """Return ``<service>/<remote>@<commit>/-/blob/<path>``. Position is not encoded."""
        return f"{service_url.rstrip('/')}/{self.remote}@{self.commit}/-/blob/{self.path}"

    async def read(self, source: ContentSource) -> tuple[str, ...]:
        """Fetch the referenced file's lines from ``source``."""
        return await source.fetch_file_contents(self.remote, self.commit, self.path)

    def to_dict(self) -> dict[str, object]:
        """Serialize Reference to a plain dictionary."""
        return {
            "remote": self.remote,
            "commit": self.commit,
            "path": self.path,
            "line": self.line,
            "col": self.col,
        }

    @classmethod
    def from_dict(cls, value: Mapping[str, object]) -> Reference:
        """Deserialize Reference from a plain dictionary."""
        data = as_str_object_dict(value, field_name="Reference")
        return cls(
            remote=require_string(data.get("remote"), field_name="Reference.remote"),
            commit=require_string(data.get("commit"), field_name="Reference.commit"),
            path=require_string(data.get("path", ""), field_name="Reference.path"),
            line=optional_int(data.get("line"), field_name="Reference.line"),
            col=optional_int(data.get("col"), field_name="Reference.col"),
        )

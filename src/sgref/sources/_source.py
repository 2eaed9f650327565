"""Collaborator protocols: what the resolution pipeline needs from a code host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class PathInfo:
    """One repository path and whether it names a directory."""

    path: str
    is_directory: bool


def collapse_remote(remote: str) -> str:
    """Collapse doubled separators in a remote name; the service rejects ``a//b``."""
    while "//" in remote:
        remote = remote.replace("//", "/")
    return remote


def split_lines(content: str) -> tuple[str, ...]:
    """Split file content into lines on ``\\n``, keeping a trailing empty line if present."""
    return tuple(content.split("\n"))


@runtime_checkable
class RevisionResolver(Protocol):
    """Turns a symbolic revision into a full commit id.

    Implementations raise :class:`sgref.errors.NotFoundError` with kind
    ``"repository"`` or ``"revision"``, :class:`sgref.errors.NoDataError` when
    the answer is empty, and :class:`sgref.errors.TransportError` (or its
    timeout subclass) when the lookup fails in transit.
    """

    async def resolve_revision(self, remote: str, revision: str) -> str:
        """Return the full commit id ``revision`` points to in ``remote``."""
        ...


@runtime_checkable
class ContentSource(Protocol):
    """Fetches file contents at an exact commit."""

    async def fetch_file_contents(self, remote: str, commit: str, path: str) -> tuple[str, ...]:
        """Return the lines of ``path`` at ``commit``.

        Raise :class:`sgref.errors.NotFoundError` with kind ``"repository"``,
        ``"commit"`` or ``"file"`` when any of them is missing.
        """
        ...


@runtime_checkable
class CodeSource(RevisionResolver, ContentSource, Protocol):
    """A full code host: revision lookup, file contents, path metadata and directory listing."""

    async def path_info(self, remote: str, commit: str, path: str) -> PathInfo:
        """Return whether ``path`` at ``commit`` is a file or a directory."""
        ...

    async def list_directory(self, remote: str, commit: str, path: str) -> tuple[PathInfo, ...]:
        """Return the direct entries of directory ``path`` at ``commit``."""
        ...

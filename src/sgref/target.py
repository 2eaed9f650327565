"""Resolved targets: a reference classified as a file or a directory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sgref.errors import TargetKindError
from sgref.reference import Reference
from sgref.resolver import resolve_reference
from sgref.settings import DEFAULT_SERVICE_URL

if TYPE_CHECKING:
    from sgref.settings import ServiceSettings
    from sgref.sources import CodeSource, ContentSource, PathInfo


@dataclass(frozen=True, slots=True)
class FileTarget:
    """A file at an exact commit, with the optional cursor position of its reference."""

    reference: Reference

    @property
    def remote(self) -> str:
        """Return the remote of the file."""
        return self.reference.remote

    @property
    def commit(self) -> str:
        """Return the commit of the file."""
        return self.reference.commit

    @property
    def path(self) -> str:
        """Return the repository path of the file."""
        return self.reference.path

    async def read(self, source: ContentSource) -> tuple[str, ...]:
        """Fetch the file's lines from ``source``."""
        return await self.reference.read(source)


@dataclass(frozen=True, slots=True)
class DirectoryTarget:
    """A directory at an exact commit. Directories carry no cursor position."""

    remote: str
    commit: str
    path: str = ""

    def canonical_web_url(self, *, service_url: str = DEFAULT_SERVICE_URL) -> str:
        """Return ``<service>/<remote>@<commit>/-/tree/<path>``."""
        return f"{service_url.rstrip('/')}/{self.remote}@{self.commit}/-/tree/{self.path}"

    async def list_entries(self, source: CodeSource) -> tuple[PathInfo, ...]:
        """List the directory's direct entries."""
        return await source.list_directory(self.remote, self.commit, self.path)


ResolvedTarget = FileTarget | DirectoryTarget


def expect_file(target: ResolvedTarget) -> FileTarget:
    """Return ``target`` when it is a file; raise :class:`TargetKindError` for a directory."""
    if isinstance(target, FileTarget):
        return target
    msg = f"Expected a file but {target.remote}@{target.commit}/-/{target.path} is a directory"
    raise TargetKindError(msg)


async def resolve_target(
    raw: str,
    source: CodeSource,
    *,
    settings: ServiceSettings | None = None,
    timeout: float | None = None,
) -> ResolvedTarget:
    """Resolve ``raw`` and classify it as a :class:`FileTarget` or :class:`DirectoryTarget`.

    An empty path is the repository root and needs no path lookup.
    """
    reference = await resolve_reference(raw, source, settings=settings, timeout=timeout)
    if not reference.path:
        return DirectoryTarget(remote=reference.remote, commit=reference.commit)

    info = await source.path_info(reference.remote, reference.commit, reference.path)
    if info.is_directory:
        return DirectoryTarget(remote=reference.remote, commit=reference.commit, path=reference.path)
    return FileTarget(reference=reference)

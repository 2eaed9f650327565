"""InMemorySource: dict-based code host for development and testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sgref.errors import NotFoundError
from sgref.reference import is_full_commit_id
from sgref.sources._source import PathInfo, collapse_remote, split_lines

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class InMemorySource:
    """In-memory code host for development and testing.

    Every collaborator call is appended to ``calls`` as ``(method, *args)`` so
    tests can assert how often the network would have been hit.
    """

    def __init__(self) -> None:
        """Initialize an empty source."""
        self._revisions: dict[str, dict[str, str]] = {}
        self._files: dict[tuple[str, str], dict[str, str]] = {}
        self.calls: list[tuple[str, ...]] = []

    @classmethod
    def from_preloaded(
        cls,
        commits: Mapping[str, Mapping[str, Mapping[str, str]]],
    ) -> InMemorySource:
        """Build a source from ``{remote: {commit: {path: content}}}`` data."""
        source = cls()
        for remote, by_commit in commits.items():
            for commit, files in by_commit.items():
                source.add_commit(remote, commit, files)
        return source

    def add_commit(
        self,
        remote: str,
        commit: str,
        files: Mapping[str, str],
        *,
        revisions: Iterable[str] = (),
    ) -> None:
        """Register a commit with its files and the symbolic revisions pointing at it."""
        if not is_full_commit_id(commit):
            msg = f"commit must be a full 40-character hex id, got {commit!r}."
            raise ValueError(msg)
        remote = collapse_remote(remote)
        names = self._revisions.setdefault(remote, {})
        names[commit] = commit
        for revision in revisions:
            names[revision] = commit
        self._files[(remote, commit)] = {path.strip("/"): content for path, content in files.items()}

    def _commit_files(self, remote: str, commit: str) -> dict[str, str]:
        if remote not in self._revisions:
            raise NotFoundError("repository", remote)
        files = self._files.get((remote, commit))
        if files is None:
            raise NotFoundError("commit", remote, revision=commit)
        return files

    async def resolve_revision(self, remote: str, revision: str) -> str:
        """Resolve a named revision, full id, or unambiguous abbreviated id."""
        self.calls.append(("resolve_revision", remote, revision))
        remote = collapse_remote(remote)
        names = self._revisions.get(remote)
        if names is None:
            raise NotFoundError("repository", remote)
        commit = names.get(revision)
        if commit is not None:
            return commit
        matches = {name for name in names.values() if revision and name.startswith(revision.lower())}
        if len(matches) == 1:
            return matches.pop()
        raise NotFoundError("revision", remote, revision=revision)

    async def fetch_file_contents(self, remote: str, commit: str, path: str) -> tuple[str, ...]:
        """Return the lines of a stored file."""
        self.calls.append(("fetch_file_contents", remote, commit, path))
        remote = collapse_remote(remote)
        files = self._commit_files(remote, commit)
        content = files.get(path.strip("/"))
        if content is None:
            raise NotFoundError("file", remote, revision=commit, path=path)
        return split_lines(content)

    async def path_info(self, remote: str, commit: str, path: str) -> PathInfo:
        """Classify ``path`` as a stored file or a directory implied by stored paths."""
        self.calls.append(("path_info", remote, commit, path))
        remote = collapse_remote(remote)
        files = self._commit_files(remote, commit)
        path = path.strip("/")
        if path in files:
            return PathInfo(path=path, is_directory=False)
        if not path or any(name.startswith(f"{path}/") for name in files):
            return PathInfo(path=path, is_directory=True)
        raise NotFoundError("file", remote, revision=commit, path=path)

    async def list_directory(self, remote: str, commit: str, path: str) -> tuple[PathInfo, ...]:
        """Return the direct children of a directory, sorted by path."""
        self.calls.append(("list_directory", remote, commit, path))
        remote = collapse_remote(remote)
        files = self._commit_files(remote, commit)
        path = path.strip("/")
        prefix = f"{path}/" if path else ""
        entries: dict[str, bool] = {}
        for name in files:
            if not name.startswith(prefix):
                continue
            child, sep, _ = name[len(prefix) :].partition("/")
            entries[f"{prefix}{child}"] = bool(sep)
        if not entries and path:
            raise NotFoundError("file", remote, revision=commit, path=path)
        return tuple(PathInfo(path=name, is_directory=is_dir) for name, is_dir in sorted(entries.items()))

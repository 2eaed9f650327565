"""SourcegraphSource: code host backed by the Sourcegraph GraphQL API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

import httpx
import structlog

from sgref.errors import LookupTimeoutError, NoDataError, NotFoundError, NotFoundKind, TransportError
from sgref.settings import ServiceSettings
from sgref.sources._source import PathInfo, collapse_remote, split_lines

if TYPE_CHECKING:
    from types import TracebackType

logger = structlog.get_logger(__name__)

COMMIT_QUERY = """
query CommitOid($name: String!, $rev: String!) {
  repository(name: $name) {
    commit(rev: $rev) {
      oid
    }
  }
}
"""

FILE_QUERY = """
query FileContents($name: String!, $rev: String!, $path: String!) {
  repository(name: $name) {
    commit(rev: $rev) {
      file(path: $path) {
        content
      }
    }
  }
}
"""

PATH_INFO_QUERY = """
query PathInfo($name: String!, $rev: String!, $path: String!) {
  repository(name: $name) {
    commit(rev: $rev) {
      path(path: $path) {
        path
        isDirectory
      }
    }
  }
}
"""

LIST_FILES_QUERY = """
query ListFiles($name: String!, $rev: String!, $path: String!) {
  repository(name: $name) {
    commit(rev: $rev) {
      tree(path: $path) {
        entries {
          path
          isDirectory
        }
      }
    }
  }
}
"""


def _field(value: object, name: str) -> object:
    """Return ``value[name]`` for mapping payloads, ``None`` otherwise."""
    if not isinstance(value, Mapping):
        return None
    return value.get(name)


def _path_info(value: object) -> PathInfo:
    path = _field(value, "path")
    is_directory = _field(value, "isDirectory")
    if not isinstance(path, str) or not isinstance(is_directory, bool):
        msg = f"Unexpected path entry in response: {value!r}"
        raise NoDataError(msg)
    return PathInfo(path=path, is_directory=is_directory)


class SourcegraphSource:
    """Code host that answers lookups with the Sourcegraph GraphQL API.

    Pass an ``httpx.AsyncClient`` to share a connection pool or to inject a
    mock transport; otherwise one is created on first use and closed by
    :meth:`aclose` (or ``async with``).

    Usage::

        settings = ServiceSettings.from_env()
        async with SourcegraphSource(settings) as source:
            ref = await resolve_reference("sg://gh/neovim/neovim/-/blob/README.md", source, settings=settings)
            lines = await ref.read(source)
    """

    def __init__(self, settings: ServiceSettings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        """Initialize with service settings and an optional HTTP client."""
        self._settings = settings or ServiceSettings()
        self._client = client
        self._owns_client = client is None

    @property
    def settings(self) -> ServiceSettings:
        """Return the settings this source sends requests with."""
        return self._settings

    async def __aenter__(self) -> SourcegraphSource:
        """Open the HTTP client."""
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Close the HTTP client if this source created it."""
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _query(self, operation: str, query: str, variables: Mapping[str, str]) -> Mapping[str, object]:
        """POST one GraphQL query and return its ``data`` object."""
        client = self._ensure_client()
        url = self._settings.graphql_url
        logger.debug("Sending GraphQL request", operation=operation, url=url, variables=dict(variables))
        try:
            response = await client.post(
                url,
                json={"query": query, "variables": dict(variables)},
                headers=self._settings.headers(),
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            msg = f"{operation} request to {url} timed out"
            raise LookupTimeoutError(msg) from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            msg = f"{operation} request to {url} failed with HTTP {status_code}"
            raise TransportError(msg, status_code=status_code) from exc
        except httpx.HTTPError as exc:
            msg = f"{operation} request to {url} failed: {exc}"
            raise TransportError(msg) from exc

        logger.debug("GraphQL request completed", operation=operation, status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            msg = f"{operation} response is not JSON"
            raise NoDataError(msg) from exc

        raw_errors = _field(payload, "errors")
        errors = tuple(
            str(_field(error, "message") or error) for error in (raw_errors if isinstance(raw_errors, list) else ())
        )
        data = _field(payload, "data")
        if not isinstance(data, Mapping):
            logger.warning("GraphQL response has no data", operation=operation, errors=errors)
            msg = f"No data in {operation} response"
            raise NoDataError(msg, errors=errors)
        if errors:
            logger.warning("GraphQL response carried errors", operation=operation, errors=errors)
        return data

    async def _commit(
        self,
        operation: str,
        query: str,
        remote: str,
        revision: str,
        *,
        missing: NotFoundKind = "commit",
        **extra: str,
    ) -> Mapping[str, object]:
        """Run a repository/commit query and return the commit object, raising NotFoundError on nulls."""
        name = collapse_remote(remote)
        data = await self._query(operation, query, {"name": name, "rev": revision, **extra})
        repository = _field(data, "repository")
        if repository is None:
            raise NotFoundError("repository", name)
        commit = _field(repository, "commit")
        if not isinstance(commit, Mapping):
            raise NotFoundError(missing, name, revision=revision)
        return commit

    async def resolve_revision(self, remote: str, revision: str) -> str:
        """Return the full commit id ``revision`` points to in ``remote``."""
        commit = await self._commit("CommitOid", COMMIT_QUERY, remote, revision, missing="revision")
        oid = _field(commit, "oid")
        if not isinstance(oid, str):
            msg = f"CommitOid response for {remote}@{revision} has no oid"
            raise NoDataError(msg)
        return oid

    async def fetch_file_contents(self, remote: str, commit: str, path: str) -> tuple[str, ...]:
        """Return the lines of ``path`` at ``commit``."""
        commit_data = await self._commit("FileContents", FILE_QUERY, remote, commit, path=path)
        file_data = _field(commit_data, "file")
        if file_data is None:
            raise NotFoundError("file", collapse_remote(remote), revision=commit, path=path)
        content = _field(file_data, "content")
        if not isinstance(content, str):
            msg = f"FileContents response for {path} has no content"
            raise NoDataError(msg)
        return split_lines(content)

    async def path_info(self, remote: str, commit: str, path: str) -> PathInfo:
        """Return whether ``path`` at ``commit`` is a file or a directory."""
        commit_data = await self._commit("PathInfo", PATH_INFO_QUERY, remote, commit, path=path)
        entry = _field(commit_data, "path")
        if entry is None:
            raise NotFoundError("file", collapse_remote(remote), revision=commit, path=path)
        return _path_info(entry)

    async def list_directory(self, remote: str, commit: str, path: str) -> tuple[PathInfo, ...]:
        """Return the direct entries of directory ``path`` at ``commit``."""
        commit_data = await self._commit("ListFiles", LIST_FILES_QUERY, remote, commit, path=path)
        tree = _field(commit_data, "tree")
        if tree is None:
            raise NotFoundError("file", collapse_remote(remote), revision=commit, path=path)
        entries = _field(tree, "entries")
        if not isinstance(entries, list):
            msg = f"ListFiles response for {path} has no entries"
            raise NoDataError(msg)
        return tuple(_path_info(entry) for entry in entries)

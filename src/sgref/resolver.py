"""Commit resolution and the raw-string-to-Reference pipeline."""

from __future__ import annotations

import asyncio
import functools
from typing import TYPE_CHECKING

import structlog

from sgref.errors import LookupTimeoutError, NoDataError
from sgref.normalize import normalize
from sgref.parse import parse
from sgref.reference import Reference, is_full_commit_id
from sgref.settings import ServiceSettings

if TYPE_CHECKING:
    from sgref.sources import RevisionResolver

logger = structlog.get_logger(__name__)

_DEFAULT_SETTINGS = ServiceSettings()


async def resolve_commit(
    resolver: RevisionResolver,
    remote: str,
    revision: str,
    *,
    timeout: float | None = None,
) -> str:
    """Return the full commit id for ``revision`` in ``remote``.

    A revision that already is a full commit id is returned unchanged without
    calling ``resolver``. Anything else costs exactly one lookup; a lookup
    that exceeds ``timeout`` seconds raises :class:`LookupTimeoutError`.
    Not-found and no-data errors from the resolver propagate unchanged.
    """
    if is_full_commit_id(revision):
        return revision

    logger.debug("Resolving revision", remote=remote, revision=revision)
    try:
        commit = await asyncio.wait_for(resolver.resolve_revision(remote, revision), timeout)
    except TimeoutError as exc:
        msg = f"Timed out resolving {remote}@{revision}"
        raise LookupTimeoutError(msg) from exc

    if not isinstance(commit, str) or not commit:
        msg = f"Lookup of {remote}@{revision} returned no commit id"
        raise NoDataError(msg)
    logger.debug("Resolved revision", remote=remote, revision=revision, commit=commit)
    return commit


class CommitCache:
    """Memoizing :class:`~sgref.sources.RevisionResolver` wrapper.

    Entries are keyed by ``(remote, revision)``. Concurrent requests for the
    same key share one in-flight lookup task, and a caller that is cancelled
    or times out leaves that task running for the others. Failed lookups are
    dropped so the next request retries. Full commit ids never reach the
    cache because :func:`resolve_commit` answers them without a lookup.

    Symbolic revisions such as branch names move; call :meth:`invalidate`
    when a cached answer may be stale. A cache belongs to one event loop.
    """

    def __init__(self, resolver: RevisionResolver) -> None:
        """Wrap ``resolver``."""
        self._resolver = resolver
        self._entries: dict[tuple[str, str], asyncio.Future[str]] = {}

    def __len__(self) -> int:
        """Return the number of completed entries."""
        return sum(1 for task in self._entries.values() if task.done())

    async def resolve_revision(self, remote: str, revision: str) -> str:
        """Return the cached commit id for ``(remote, revision)``, looking it up at most once."""
        if is_full_commit_id(revision):
            return revision
        key = (remote, revision)
        task = self._entries.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolver.resolve_revision(remote, revision))
            task.add_done_callback(functools.partial(self._forget_failed, key))
            self._entries[key] = task
        else:
            logger.debug("Commit cache hit", remote=remote, revision=revision, in_flight=not task.done())
        return await asyncio.shield(task)

    def _forget_failed(self, key: tuple[str, str], task: asyncio.Future[str]) -> None:
        if not task.cancelled() and task.exception() is None:
            return
        if self._entries.get(key) is task:
            del self._entries[key]

    def invalidate(self, remote: str, revision: str | None = None) -> int:
        """Drop completed entries for ``remote`` (one revision, or all). Return how many were dropped."""
        keys = [
            key
            for key, task in self._entries.items()
            if key[0] == remote and (revision is None or key[1] == revision) and task.done()
        ]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        """Drop all completed entries; in-flight lookups keep running."""
        for key in [key for key, task in self._entries.items() if task.done()]:
            del self._entries[key]


async def resolve_reference(
    raw: str,
    resolver: RevisionResolver,
    *,
    settings: ServiceSettings | None = None,
    timeout: float | None = None,
) -> Reference:
    """Normalize, parse and resolve ``raw`` into a :class:`Reference`.

    The string is fully parsed before any lookup, so malformed input never
    reaches ``resolver``. Errors propagate; no partial Reference is returned.
    ``timeout`` defaults to ``settings.timeout``.
    """
    settings = settings or _DEFAULT_SETTINGS
    if timeout is None:
        timeout = settings.timeout

    normalized = normalize(raw, host_aliases=settings.host_aliases, service_url=settings.service_url)
    parsed = parse(normalized)
    commit = await resolve_commit(resolver, parsed.remote, parsed.revision, timeout=timeout)
    return Reference(
        remote=parsed.remote,
        commit=commit,
        path=parsed.path,
        line=parsed.line,
        col=parsed.col,
    )

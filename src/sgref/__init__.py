"""sgref: resolve editor-facing code links into immutable references and back."""

import importlib.metadata as importlib_metadata

from sgref.errors import (
    LookupTimeoutError,
    MalformedReferenceError,
    NoDataError,
    NotFoundError,
    SgrefError,
    TargetKindError,
    TooManyQueryMarkersError,
    TransportError,
)
from sgref.normalize import normalize
from sgref.parse import ParsedReference, parse
from sgref.reference import Reference, is_full_commit_id
from sgref.resolver import CommitCache, resolve_commit, resolve_reference
from sgref.settings import ServiceSettings
from sgref.sources import CodeSource, ContentSource, InMemorySource, PathInfo, RevisionResolver, SourcegraphSource
from sgref.target import DirectoryTarget, FileTarget, ResolvedTarget, expect_file, resolve_target


def _detect_version() -> str:
    """Return installed package version or a local fallback when metadata is unavailable."""
    try:
        return importlib_metadata.version("sgref")
    except importlib_metadata.PackageNotFoundError:
        return "0.0.0+unknown"


__version__ = _detect_version()

__all__ = [
    "CodeSource",
    "CommitCache",
    "ContentSource",
    "DirectoryTarget",
    "FileTarget",
    "InMemorySource",
    "LookupTimeoutError",
    "MalformedReferenceError",
    "NoDataError",
    "NotFoundError",
    "ParsedReference",
    "PathInfo",
    "Reference",
    "ResolvedTarget",
    "RevisionResolver",
    "ServiceSettings",
    "SgrefError",
    "SourcegraphSource",
    "TargetKindError",
    "TooManyQueryMarkersError",
    "TransportError",
    "expect_file",
    "is_full_commit_id",
    "normalize",
    "parse",
    "resolve_commit",
    "resolve_reference",
    "resolve_target",
]

"""Code host collaborators: protocols, an in-memory source and the Sourcegraph GraphQL source."""

from sgref.sources._graphql import SourcegraphSource
from sgref.sources._memory import InMemorySource
from sgref.sources._source import CodeSource, ContentSource, PathInfo, RevisionResolver

__all__ = [
    "CodeSource",
    "ContentSource",
    "InMemorySource",
    "PathInfo",
    "RevisionResolver",
    "SourcegraphSource",
]

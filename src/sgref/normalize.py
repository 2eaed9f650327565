"""Syntax normalization: rewrite accepted reference forms into one prefix-free string."""

from collections.abc import Mapping

from sgref.settings import DEFAULT_HOST_ALIASES, DEFAULT_SERVICE_URL, SHORT_SCHEME

_SCHEME_SEPARATOR = "://"


def _expand_alias_after(text: str, prefix_end: int, host_aliases: Mapping[str, str]) -> str:
    """Replace the path segment starting at ``prefix_end`` when it is a known host alias."""
    head = text[prefix_end:]
    segment, sep, rest = head.partition("/")
    host = host_aliases.get(segment)
    if host is None or not sep:
        return text
    return f"{text[:prefix_end]}{host}/{rest}"


def expand_host_alias(
    raw: str,
    *,
    host_aliases: Mapping[str, str] = DEFAULT_HOST_ALIASES,
    service_url: str = DEFAULT_SERVICE_URL,
) -> str:
    """Expand a host alias written as the first segment after a scheme or the service base URL.

    ``sg://gh/org/repo`` and ``https://sourcegraph.com/gh/org/repo`` both become
    ``.../github.com/org/repo``. An alias anywhere else is left alone.
    """
    service_prefix = f"{service_url.rstrip('/')}/"
    if raw.startswith(service_prefix):
        return _expand_alias_after(raw, len(service_prefix), host_aliases)
    scheme_end = raw.find(_SCHEME_SEPARATOR)
    if scheme_end < 0:
        return raw
    return _expand_alias_after(raw, scheme_end + len(_SCHEME_SEPARATOR), host_aliases)


def normalize(
    raw: str,
    *,
    host_aliases: Mapping[str, str] = DEFAULT_HOST_ALIASES,
    service_url: str = DEFAULT_SERVICE_URL,
) -> str:
    """Rewrite a web URL, ``sg://`` link or host-aliased link into ``<remote>[@rev]/-/<path>`` form.

    Steps run in a fixed order so the prefixes cannot collide:

    1. expand a host alias directly after the scheme or service base URL
    2. strip the service base URL
    3. strip the ``sg://`` scheme

    The result is not validated; :func:`sgref.parse.parse` rejects malformed input.
    """
    service_prefix = f"{service_url.rstrip('/')}/"
    text = expand_host_alias(raw, host_aliases=host_aliases, service_url=service_url)
    text = text.removeprefix(service_prefix)
    return text.removeprefix(SHORT_SCHEME)

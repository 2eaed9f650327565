"""Reference parsing: split a normalized reference into remote, revision, path and position."""

import re
from dataclasses import dataclass
from typing import Literal

from sgref.errors import MalformedReferenceError, TooManyQueryMarkersError

PathKind = Literal["blob", "tree"]

HEAD = "HEAD"
SEGMENT_SEPARATOR = "/-/"
DEFAULT_POSITION = 1

_KIND_MARKERS: tuple[PathKind, ...] = ("blob", "tree")
_DIGITS = re.compile(r"\+?[0-9]+")
_MAX_POSITION = 2**64 - 1
_REPEATED_SLASHES = re.compile(r"/{2,}")


@dataclass(frozen=True, slots=True)
class ParsedReference:
    """Structural fields of a reference before its revision is resolved."""

    remote: str
    revision: str
    path: str
    line: int | None = None
    col: int | None = None
    kind: PathKind | None = None


def _position_value(text: str) -> int:
    # Unparseable, out-of-range or zero positions fall back to 1 instead of failing.
    if _DIGITS.fullmatch(text) is None:
        return DEFAULT_POSITION
    value = int(text)
    if value > _MAX_POSITION:
        return DEFAULT_POSITION
    return value or DEFAULT_POSITION


def parse_position(suffix: str) -> tuple[int | None, int | None]:
    """Parse an ``L<line>:<col>`` suffix into a 1-based ``(line, col)`` pair.

    Without exactly one ``:`` both values are ``None``. The first character
    of the line part is the ``L`` marker and is skipped without being checked.
    Numeric text that does not parse degrades to ``1``.
    """
    parts = suffix.split(":")
    if len(parts) != 2:
        return None, None
    line_part, col_part = parts
    return _position_value(line_part[1:]), _position_value(col_part)


def _split_kind(segment: str) -> tuple[PathKind | None, str]:
    for kind in _KIND_MARKERS:
        marker = f"{kind}/"
        if segment.startswith(marker):
            return kind, segment[len(marker) :]
    return None, segment


def parse(normalized: str) -> ParsedReference:
    """Parse a normalized reference (see :func:`sgref.normalize.normalize`).

    Raise :class:`MalformedReferenceError` when the text does not split into
    exactly one remote part and one path part around ``/-/`` or the remote is
    empty, and :class:`TooManyQueryMarkersError` when the path holds more than
    one ``?``.
    """
    segments = normalized.split(SEGMENT_SEPARATOR)
    if len(segments) != 2:
        reason = f"expected exactly one {SEGMENT_SEPARATOR!r} separator, found {len(segments) - 1}"
        raise MalformedReferenceError(normalized, reason)
    remote_part, path_part = segments

    remote, _, revision = remote_part.partition("@")
    remote = _REPEATED_SLASHES.sub("/", remote).strip("/")
    if not remote:
        raise MalformedReferenceError(normalized, "remote is empty")
    if not revision:
        revision = HEAD

    kind, path_and_suffix = _split_kind(path_part)
    pieces = path_and_suffix.split("?")
    if len(pieces) > 2:
        raise TooManyQueryMarkersError(normalized, len(pieces) - 1)

    line, col = parse_position(pieces[1]) if len(pieces) == 2 else (None, None)
    return ParsedReference(
        remote=remote,
        revision=revision,
        path=pieces[0],
        line=line,
        col=col,
        kind=kind,
    )

"""Tests for sgref.reference."""

import pytest

from sgref.reference import Reference, alias_remote, is_full_commit_id
from sgref.sources import InMemorySource

COMMIT = "0123456789abcdef0123456789abcdef01234567"


def _ref(**kwargs: object) -> Reference:
    defaults: dict[str, object] = {
        "remote": "github.com/neovim/neovim",
        "commit": COMMIT,
        "path": "src/nvim/autocmd.c",
    }
    defaults.update(kwargs)
    return Reference(**defaults)  # type: ignore[arg-type]


# =============================================================================
# is_full_commit_id / alias_remote
# =============================================================================


@pytest.mark.parametrize(
    ("revision", "expected"),
    [
        pytest.param(COMMIT, True, id="lower-hex"),
        pytest.param(COMMIT.upper(), True, id="upper-hex"),
        pytest.param(COMMIT[:-1], False, id="39-chars"),
        pytest.param(COMMIT + "0", False, id="41-chars"),
        pytest.param("g" * 40, False, id="not-hex"),
        pytest.param("HEAD", False, id="symbolic"),
        pytest.param("", False, id="empty"),
    ],
)
def test_is_full_commit_id(revision: str, expected: bool) -> None:
    assert is_full_commit_id(revision) is expected


def test_alias_remote_replaces_known_host() -> None:
    assert alias_remote("github.com/neovim/neovim") == "gh/neovim/neovim"


def test_alias_remote_keeps_unknown_host() -> None:
    assert alias_remote("gitlab.com/org/repo") == "gitlab.com/org/repo"


def test_alias_remote_only_matches_whole_host() -> None:
    assert alias_remote("github.company.com/org/repo") == "github.company.com/org/repo"


# =============================================================================
# Construction invariants
# =============================================================================


def test_is_frozen() -> None:
    ref = _ref()
    with pytest.raises(AttributeError):
        ref.commit = "HEAD"  # type: ignore[misc]


def test_defaults() -> None:
    ref = Reference(remote="github.com/a/b", commit="HEAD")
    assert ref.path == ""
    assert ref.line is None
    assert ref.col is None
    assert not ref.is_resolved


@pytest.mark.parametrize(
    ("overrides", "error_pattern"),
    [
        ({"remote": ""}, "remote cannot be empty"),
        ({"remote": "github.com//a/b"}, "must not contain"),
        ({"commit": ""}, "commit cannot be empty"),
        ({"col": 3}, "col requires"),
        ({"line": 0}, "line must be >= 1"),
        ({"line": 2, "col": 0}, "col must be >= 1"),
    ],
)
def test_invalid_fields_raise(overrides: dict[str, object], error_pattern: str) -> None:
    with pytest.raises(ValueError, match=error_pattern):
        _ref(**overrides)


def test_line_without_col_is_allowed() -> None:
    ref = _ref(line=4)
    assert ref.line == 4
    assert ref.col is None


# =============================================================================
# Canonicalization
# =============================================================================


def test_short_display_name_aliases_host_and_shortens_commit() -> None:
    assert _ref().short_display_name() == "sg://gh/neovim/neovim@01234/-/src/nvim/autocmd.c"


def test_short_display_name_unknown_host() -> None:
    ref = _ref(remote="gitlab.com/org/repo", path="")
    assert ref.short_display_name() == "sg://gitlab.com/org/repo@01234/-/"


def test_short_display_name_custom_aliases() -> None:
    ref = _ref(remote="gitlab.com/org/repo")
    assert ref.short_display_name(host_aliases={"gl": "gitlab.com"}).startswith("sg://gl/org/repo@01234/")


def test_short_display_name_collides_on_shared_commit_prefix() -> None:
    other = _ref(commit="01234" + "f" * 35)
    assert other.commit != COMMIT
    assert other.short_display_name() == _ref().short_display_name()


def test_canonical_web_url() -> None:
    assert _ref(line=3, col=4).canonical_web_url() == (
        f"https://sourcegraph.com/github.com/neovim/neovim@{COMMIT}/-/blob/src/nvim/autocmd.c"
    )


def test_canonical_web_url_custom_service() -> None:
    url = _ref().canonical_web_url(service_url="https://sg.example.com/")
    assert url.startswith(f"https://sg.example.com/github.com/neovim/neovim@{COMMIT}/-/blob/")


# =============================================================================
# read
# =============================================================================


@pytest.mark.asyncio
async def test_read_fetches_lines_from_source() -> None:
    source = InMemorySource()
    source.add_commit("github.com/neovim/neovim", COMMIT, {"src/nvim/autocmd.c": "int x;\nint y;\n"})
    lines = await _ref().read(source)
    assert lines == ("int x;", "int y;", "")
    assert source.calls == [("fetch_file_contents", "github.com/neovim/neovim", COMMIT, "src/nvim/autocmd.c")]


# =============================================================================
# to_dict / from_dict
# =============================================================================


def test_to_dict() -> None:
    assert _ref(line=29, col=2).to_dict() == {
        "remote": "github.com/neovim/neovim",
        "commit": COMMIT,
        "path": "src/nvim/autocmd.c",
        "line": 29,
        "col": 2,
    }


def test_from_dict_restores_reference() -> None:
    ref = _ref(line=29, col=2)
    assert Reference.from_dict(ref.to_dict()) == ref


def test_from_dict_path_defaults_to_empty() -> None:
    ref = Reference.from_dict({"remote": "github.com/a/b", "commit": COMMIT})
    assert ref.path == ""


@pytest.mark.parametrize(
    ("payload", "error_pattern"),
    [
        pytest.param({"commit": COMMIT}, "Reference.remote must be a string", id="missing-remote"),
        pytest.param({"remote": "github.com/a/b", "commit": 1}, "Reference.commit", id="bad-commit"),
        pytest.param({"remote": "a/b", "commit": COMMIT, "line": "3"}, "Reference.line", id="bad-line"),
        pytest.param({"remote": "a/b", "commit": COMMIT, "line": True}, "Reference.line", id="bool-line"),
    ],
)
def test_from_dict_rejects_bad_payload(payload: dict[str, object], error_pattern: str) -> None:
    with pytest.raises(TypeError, match=error_pattern):
        Reference.from_dict(payload)


def test_from_dict_rejects_non_mapping() -> None:
    with pytest.raises(TypeError, match="Reference must be a mapping"):
        Reference.from_dict(["not", "a", "mapping"])  # type: ignore[arg-type]

"""Tests for SourcegraphSource against a mocked GraphQL endpoint."""

import json
from collections.abc import Callable

import httpx
import pytest

from sgref.errors import LookupTimeoutError, NoDataError, NotFoundError, TransportError
from sgref.resolver import resolve_reference
from sgref.settings import ServiceSettings
from sgref.sources import CodeSource, PathInfo, SourcegraphSource

COMMIT = "0123456789abcdef0123456789abcdef01234567"
REMOTE = "github.com/sourcegraph/sourcegraph"

Handler = Callable[[httpx.Request], httpx.Response]


def _source(handler: Handler, settings: ServiceSettings | None = None) -> SourcegraphSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SourcegraphSource(settings, client=client)


def _answer(data: object, seen: list[dict[str, object]] | None = None) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(json.loads(request.content))
        return httpx.Response(200, json={"data": data})

    return handler


def _commit_data(commit: object) -> dict[str, object]:
    return {"repository": {"commit": commit}}


def test_satisfies_code_source_protocol() -> None:
    assert isinstance(SourcegraphSource(), CodeSource)


# =============================================================================
# resolve_revision
# =============================================================================


@pytest.mark.asyncio
async def test_resolve_revision_returns_oid() -> None:
    seen: list[dict[str, object]] = []
    source = _source(_answer(_commit_data({"oid": COMMIT}), seen))
    assert await source.resolve_revision(REMOTE, "main") == COMMIT
    assert seen[0]["variables"] == {"name": REMOTE, "rev": "main"}
    assert "CommitOid" in str(seen[0]["query"])


@pytest.mark.asyncio
async def test_resolve_revision_collapses_doubled_separators() -> None:
    seen: list[dict[str, object]] = []
    source = _source(_answer(_commit_data({"oid": COMMIT}), seen))
    await source.resolve_revision("github.com//sourcegraph/sourcegraph", "HEAD")
    assert seen[0]["variables"] == {"name": REMOTE, "rev": "HEAD"}


@pytest.mark.asyncio
async def test_resolve_revision_missing_repository() -> None:
    source = _source(_answer({"repository": None}))
    with pytest.raises(NotFoundError) as exc_info:
        await source.resolve_revision(REMOTE, "main")
    assert exc_info.value.kind == "repository"
    assert exc_info.value.remote == REMOTE


@pytest.mark.asyncio
async def test_resolve_revision_missing_revision() -> None:
    source = _source(_answer(_commit_data(None)))
    with pytest.raises(NotFoundError) as exc_info:
        await source.resolve_revision(REMOTE, "nope")
    assert exc_info.value.kind == "revision"
    assert exc_info.value.revision == "nope"


@pytest.mark.asyncio
async def test_resolve_revision_without_oid() -> None:
    source = _source(_answer(_commit_data({})))
    with pytest.raises(NoDataError, match="has no oid"):
        await source.resolve_revision(REMOTE, "main")


# =============================================================================
# Transport and payload failures
# =============================================================================


@pytest.mark.asyncio
async def test_timeout_maps_to_lookup_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        msg = "read timed out"
        raise httpx.ReadTimeout(msg, request=request)

    with pytest.raises(LookupTimeoutError) as exc_info:
        await _source(handler).resolve_revision(REMOTE, "main")
    assert exc_info.value.retryable is True
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_connection_failure_maps_to_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        msg = "connection refused"
        raise httpx.ConnectError(msg, request=request)

    with pytest.raises(TransportError) as exc_info:
        await _source(handler).resolve_revision(REMOTE, "main")
    assert not isinstance(exc_info.value, LookupTimeoutError)
    assert exc_info.value.retryable is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status_code", "retryable"),
    [
        pytest.param(500, True, id="server-error"),
        pytest.param(429, True, id="rate-limited"),
        pytest.param(401, False, id="unauthorized"),
    ],
)
async def test_http_status_maps_to_transport_error(status_code: int, retryable: bool) -> None:
    source = _source(lambda request: httpx.Response(status_code, text="error"))
    with pytest.raises(TransportError) as exc_info:
        await source.resolve_revision(REMOTE, "main")
    assert exc_info.value.status_code == status_code
    assert exc_info.value.retryable is retryable


@pytest.mark.asyncio
async def test_non_json_response_is_no_data() -> None:
    source = _source(lambda request: httpx.Response(200, text="<html>login</html>"))
    with pytest.raises(NoDataError, match="not JSON"):
        await source.resolve_revision(REMOTE, "main")


@pytest.mark.asyncio
async def test_errors_without_data_is_no_data() -> None:
    payload = {"data": None, "errors": [{"message": "must be authenticated"}]}
    source = _source(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(NoDataError) as exc_info:
        await source.resolve_revision(REMOTE, "main")
    assert exc_info.value.errors == ("must be authenticated",)
    assert "must be authenticated" in str(exc_info.value)


@pytest.mark.asyncio
async def test_errors_alongside_data_are_not_fatal() -> None:
    payload = {"data": _commit_data({"oid": COMMIT}), "errors": [{"message": "partial"}]}
    source = _source(lambda request: httpx.Response(200, json=payload))
    assert await source.resolve_revision(REMOTE, "main") == COMMIT


# =============================================================================
# Request shape
# =============================================================================


@pytest.mark.asyncio
async def test_request_targets_graphql_endpoint_with_token() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"data": _commit_data({"oid": COMMIT})})

    settings = ServiceSettings(service_url="https://sg.example.com/", access_token="sgp_abc")
    await _source(handler, settings).resolve_revision(REMOTE, "main")

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert str(requests[0].url) == "https://sg.example.com/.api/graphql"
    assert requests[0].headers["Authorization"] == "token sgp_abc"


@pytest.mark.asyncio
async def test_request_without_token_has_no_authorization() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"data": _commit_data({"oid": COMMIT})})

    await _source(handler).resolve_revision(REMOTE, "main")
    assert "Authorization" not in requests[0].headers


# =============================================================================
# File contents, path info and listing
# =============================================================================


@pytest.mark.asyncio
async def test_fetch_file_contents() -> None:
    seen: list[dict[str, object]] = []
    source = _source(_answer(_commit_data({"file": {"content": "a\nb\n"}}), seen))
    assert await source.fetch_file_contents(REMOTE, COMMIT, "dev/sg/rfc.go") == ("a", "b", "")
    assert seen[0]["variables"] == {"name": REMOTE, "rev": COMMIT, "path": "dev/sg/rfc.go"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("data", "kind"),
    [
        pytest.param({"repository": None}, "repository", id="repository"),
        pytest.param(_commit_data(None), "commit", id="commit"),
        pytest.param(_commit_data({"file": None}), "file", id="file"),
    ],
)
async def test_fetch_file_contents_not_found(data: object, kind: str) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        await _source(_answer(data)).fetch_file_contents(REMOTE, COMMIT, "missing.go")
    assert exc_info.value.kind == kind


@pytest.mark.asyncio
async def test_path_info_directory() -> None:
    source = _source(_answer(_commit_data({"path": {"path": "dev/sg", "isDirectory": True}})))
    assert await source.path_info(REMOTE, COMMIT, "dev/sg") == PathInfo(path="dev/sg", is_directory=True)


@pytest.mark.asyncio
async def test_path_info_missing() -> None:
    with pytest.raises(NotFoundError) as exc_info:
        await _source(_answer(_commit_data({"path": None}))).path_info(REMOTE, COMMIT, "nope")
    assert exc_info.value.kind == "file"


@pytest.mark.asyncio
async def test_path_info_malformed_entry() -> None:
    source = _source(_answer(_commit_data({"path": {"path": "dev/sg"}})))
    with pytest.raises(NoDataError, match="Unexpected path entry"):
        await source.path_info(REMOTE, COMMIT, "dev/sg")


@pytest.mark.asyncio
async def test_list_directory() -> None:
    entries = [
        {"path": "dev/sg/internal", "isDirectory": True},
        {"path": "dev/sg/rfc.go", "isDirectory": False},
    ]
    source = _source(_answer(_commit_data({"tree": {"entries": entries}})))
    assert await source.list_directory(REMOTE, COMMIT, "dev/sg") == (
        PathInfo(path="dev/sg/internal", is_directory=True),
        PathInfo(path="dev/sg/rfc.go", is_directory=False),
    )


@pytest.mark.asyncio
async def test_list_directory_missing() -> None:
    with pytest.raises(NotFoundError) as exc_info:
        await _source(_answer(_commit_data({"tree": None}))).list_directory(REMOTE, COMMIT, "nope")
    assert exc_info.value.kind == "file"


# =============================================================================
# Pipeline and client lifecycle
# =============================================================================


@pytest.mark.asyncio
async def test_resolve_reference_through_graphql() -> None:
    seen: list[dict[str, object]] = []
    source = _source(_answer(_commit_data({"oid": COMMIT}), seen))
    ref = await resolve_reference("https://sourcegraph.com/gh/sourcegraph/sourcegraph/-/blob/README.md?L3:1", source)
    assert ref.remote == REMOTE
    assert ref.commit == COMMIT
    assert ref.path == "README.md"
    assert ref.line == 3
    assert seen[0]["variables"] == {"name": REMOTE, "rev": "HEAD"}


@pytest.mark.asyncio
async def test_full_commit_skips_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        msg = "no request expected"
        raise AssertionError(msg)

    ref = await resolve_reference(f"sg://gh/sourcegraph/sourcegraph@{COMMIT}/-/README.md", _source(handler))
    assert ref.commit == COMMIT


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(_answer(_commit_data({"oid": COMMIT}))))
    async with SourcegraphSource(client=client) as source:
        await source.resolve_revision(REMOTE, "main")
    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
async def test_owned_client_is_closed() -> None:
    source = SourcegraphSource(ServiceSettings(timeout=2.0))
    async with source:
        client = source._ensure_client()
        assert client.timeout == httpx.Timeout(2.0)
    assert client.is_closed
    assert source._client is None

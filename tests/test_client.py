import httpx
import pytest

from pipeline_client.client import Client
from pipeline_client.exceptions import InvalidMethodError, InvalidMiddlewareResult


def _client(handler, base_url: str = "http://base") -> Client:
    return Client(httpx.Client(transport=httpx.MockTransport(handler)), base_url)


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True})


def _recording(name: str, calls: list[str]):
    def middleware(request: httpx.Request) -> httpx.Request:
        calls.append(name)
        return request

    return middleware


def _failing(name: str, calls: list[str], error: Exception):
    def middleware(request: httpx.Request) -> httpx.Request:
        calls.append(name)
        raise error

    return middleware


@pytest.mark.parametrize("client_count", [0, 1, 3])
@pytest.mark.parametrize("call_count", [0, 1, 3])
def test_client_middleware_runs_before_call_middleware(client_count, call_count):
    calls: list[str] = []
    client = _client(_ok)
    client.use(*[_recording(f"client-{i}", calls) for i in range(client_count)])

    response = client.do(
        httpx.Request("GET", "http://base/items"),
        [_recording(f"call-{i}", calls) for i in range(call_count)],
    )

    assert response.status_code == 200
    expected = [f"client-{i}" for i in range(client_count)] + [f"call-{i}" for i in range(call_count)]
    assert calls == expected


def test_use_appends_in_registration_order():
    calls: list[str] = []
    client = _client(_ok)
    client.use(_recording("a", calls))
    client.use(_recording("b", calls), _recording("c", calls))

    client.get("http://base/")

    assert calls == ["a", "b", "c"]
    assert len(client.middleware) == 3


def test_client_middleware_error_short_circuits_everything():
    calls: list[str] = []
    sent: list[httpx.Request] = []
    error = RuntimeError("denied")

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200)

    client = _client(handler)
    client.use(_recording("first", calls), _failing("second", calls, error), _recording("third", calls))

    with pytest.raises(RuntimeError) as excinfo:
        client.get("http://base/", _recording("call", calls))

    assert excinfo.value is error
    assert calls == ["first", "second"]
    assert sent == []


def test_call_middleware_error_stops_remaining_call_middleware():
    calls: list[str] = []
    sent: list[httpx.Request] = []
    error = ValueError("bad header")

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(200)

    client = _client(handler)
    client.use(_recording("client", calls))

    with pytest.raises(ValueError) as excinfo:
        client.post(
            "http://base/",
            b"{}",
            _recording("call-1", calls),
            _failing("call-2", calls, error),
            _recording("call-3", calls),
        )

    assert excinfo.value is error
    assert calls == ["client", "call-1", "call-2"]
    assert sent == []


def test_middleware_can_replace_request():
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(204)

    def reroute(request: httpx.Request) -> httpx.Request:
        return httpx.Request("PATCH", "http://other/replaced", headers={"X-Rerouted": "1"})

    client = _client(handler)
    response = client.delete("http://base/items/1", reroute)

    assert response.status_code == 204
    assert captured[0].method == "PATCH"
    assert str(captured[0].url) == "http://other/replaced"
    assert captured[0].headers["X-Rerouted"] == "1"


def test_middleware_returning_none_is_rejected():
    client = _client(_ok)
    client.use(lambda request: None)

    with pytest.raises(InvalidMiddlewareResult):
        client.get("http://base/")


def test_verb_builders_send_expected_method_and_body():
    captured: list[tuple[str, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append((request.method, request.read()))
        return httpx.Response(200)

    client = _client(handler)
    client.get(client.path("/a"))
    client.post(client.path("/a"), b"post-body")
    client.put(client.path("/a"), "put-body")
    client.delete(client.path("/a"))

    assert captured == [
        ("GET", b""),
        ("POST", b"post-body"),
        ("PUT", b"put-body"),
        ("DELETE", b""),
    ]


def test_invalid_method_never_reaches_middleware():
    calls: list[str] = []
    client = _client(_ok)
    client.use(_recording("client", calls))

    with pytest.raises(InvalidMethodError):
        client.request("BAD METHOD", "http://base/", None, _recording("call", calls))

    assert calls == []


def test_malformed_url_never_reaches_middleware():
    calls: list[str] = []
    client = _client(_ok)
    client.use(_recording("client", calls))

    with pytest.raises(httpx.InvalidURL):
        client.get("http://example.com:notaport/", _recording("call", calls))

    assert calls == []


def test_transport_errors_pass_through_unchanged():
    error = httpx.ConnectError("boom")

    def handler(request: httpx.Request) -> httpx.Response:
        raise error

    client = _client(handler)

    with pytest.raises(httpx.ConnectError) as excinfo:
        client.get("http://base/")

    assert excinfo.value is error


def test_error_status_is_returned_not_raised():
    client = _client(lambda request: httpx.Response(500, text="nope"))

    response = client.get("http://base/")

    assert response.status_code == 500


def test_borrowed_transport_is_not_closed():
    transport = httpx.Client(transport=httpx.MockTransport(_ok))

    with Client(transport, "http://base") as client:
        client.get("http://base/")

    assert not transport.is_closed
    transport.close()

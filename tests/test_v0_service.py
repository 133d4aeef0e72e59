"""Tests for the streaming v0 client (httpx.MockTransport)."""
import json
import httpx
import pytest
from app.services import v0_service
from app.services.v0_service import GenerationAPIError


def test_concatenates_stream_and_strips_fence(app, v0_transport, sse):
    v0_transport.append(
        httpx.Response(
            200, content=sse("```tsx\nexport default function A() {", " return null; }\n```")
        )
    )
    with app.app_context():
        code = v0_service.generate_code("system", "user")

    assert code == "export default function A() { return null; }"
    payload = json.loads(v0_transport.requests[0].content)
    assert payload["stream"] is True
    assert payload["model"] == app.config["V0_MODEL"]
    assert payload["temperature"] == 0.2
    assert payload["max_tokens"] == 4096
    assert v0_transport.requests[0].headers["Authorization"] == "Bearer test-key"


def test_reference_image_uses_vision_model(app, v0_transport, sse):
    v0_transport.append(httpx.Response(200, content=sse("function A() {}")))
    with app.app_context():
        v0_service.generate_code("system", "user", reference_image="data:image/png;base64,AAAA")

    payload = json.loads(v0_transport.requests[0].content)
    assert payload["model"] == app.config["V0_VISION_MODEL"]
    assert payload["messages"][1]["content"][1]["image_url"]["url"].startswith("data:image/png")


def test_ignores_unframed_and_bad_chunks():
    lines = [
        ": keep-alive",
        "event: message",
        "data: {not json",
        'data: {"choices": [{"delta": {"content": "a"}}]}',
        'data: {"choices": [{"delta": {}}]}',
        'data: {"choices": [{"delta": {"content": "b"}}]}',
        "data: [DONE]",
        'data: {"choices": [{"delta": {"content": "after"}}]}',
    ]
    assert list(v0_service.iter_deltas(lines)) == ["a", "b"]


@pytest.mark.parametrize(
    "status,kind,text",
    [(400, "client", "Client error"), (503, "server", "temporarily unavailable")],
)
def test_status_errors_are_classified(app, v0_transport, status, kind, text):
    v0_transport.append(httpx.Response(status, json={"error": "nope"}))
    with app.app_context():
        with pytest.raises(GenerationAPIError) as exc_info:
            v0_service.generate_code("system", "user")

    assert exc_info.value.kind == kind
    assert exc_info.value.status_code == status
    assert text in str(exc_info.value)


def test_network_error(app, v0_transport):
    v0_transport.append(httpx.ConnectError("connection refused"))
    with app.app_context():
        with pytest.raises(GenerationAPIError) as exc_info:
            v0_service.generate_code("system", "user")
    assert exc_info.value.kind == "network"


def test_empty_stream(app, v0_transport, sse):
    v0_transport.append(httpx.Response(200, content=sse()))
    with app.app_context():
        with pytest.raises(GenerationAPIError) as exc_info:
            v0_service.generate_code("system", "user")
    assert exc_info.value.kind == "empty"


def test_ignores_well_framed_non_chunk_events():
    lines = [
        "data: null",
        "data: 1",
        'data: "text"',
        "data: []",
        'data: {"choices": null}',
        'data: {"choices": [null]}',
        'data: {"choices": ["x"]}',
        'data: {"choices": [{"delta": "x"}]}',
        'data: {"choices": [{"delta": {"content": 7}}]}',
        'data: {"choices": [{"delta": {"content": "ok"}}]}',
        "data: [DONE]",
    ]
    assert list(v0_service.iter_deltas(lines)) == ["ok"]


def test_non_chunk_events_do_not_fail_the_stream(app, v0_transport, sse):
    body = b"data: null\n\ndata: 1\n\n" + sse("export default function A() {}")
    v0_transport.append(httpx.Response(200, content=body))
    with app.app_context():
        assert v0_service.generate_code("system", "user") == "export default function A() {}"

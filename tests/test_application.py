import logging
from urllib.parse import quote

import pytest

from minirouter import Application, Group, TextContent
from minirouter.exceptions import HTTPException, MessageAborted, NotFound
from minirouter.logs import access_logging_middleware
from minirouter.routing import params_from
from minirouter.testing import MockReceive, MockSend, TestClient, get_example_scope


async def echo(response, request):
    body = await request.read()
    response.status = 201
    response.content = TextContent("OK " + body.decode())


async def echo_path(response, request):
    response.content = TextContent(request.path)


async def crash(response, request):
    raise RuntimeError("Crash!")


async def missing(response, request):
    raise NotFound()


@pytest.fixture
def app(root: Group):
    root.post("/echo", echo)
    root.get("/crash", crash)
    root.get("/missing", missing)
    return Application(root, show_error_details=False)


async def test_application_asgi_round_trip(app):
    mock_send = MockSend()

    await app(
        get_example_scope("POST", "/echo"),
        MockReceive([b"Hello, ", b"World"]),
        mock_send,
    )

    assert mock_send.status == 201
    assert mock_send.body == b"OK Hello, World"
    assert mock_send.headers[b"content-type"] == b"text/plain; charset=utf-8"
    assert mock_send.headers[b"content-length"] == b"15"


async def test_application_not_found(app):
    mock_send = MockSend()

    await app(get_example_scope("GET", "/nope"), MockReceive(), mock_send)

    assert mock_send.status == 404
    assert mock_send.body == b"Not Found"


async def test_application_sends_large_bodies_in_chunks(root):
    async def large(response, request):
        response.content = TextContent("a" * 100_000)

    root.get("/large", large)
    app = Application(root)
    mock_send = MockSend()

    await app(get_example_scope("GET", "/large"), MockReceive(), mock_send)

    bodies = [m for m in mock_send.messages if m["type"] == "http.response.body"]
    assert len(bodies) == 2
    assert bodies[0]["more_body"] is True
    assert bodies[1]["more_body"] is False
    assert mock_send.body == b"a" * 100_000


async def test_application_unhandled_exception(app, caplog):
    mock_send = MockSend()

    with caplog.at_level(logging.ERROR, logger="minirouter.server"):
        await app(get_example_scope("GET", "/crash"), MockReceive(), mock_send)

    assert mock_send.status == 500
    assert mock_send.body == b"Internal Server Error"
    assert "Unhandled exception" in caplog.text
    assert "RuntimeError: Crash!" in caplog.text


async def test_application_show_error_details(root):
    root.get("/crash", crash)
    client = TestClient(Application(root, show_error_details=True))

    response = await client.get("/crash")

    assert response.status == 500
    text = await response.text()
    assert "Traceback" in text
    assert "RuntimeError: Crash!" in text


async def test_application_show_error_details_from_env(root, monkeypatch):
    monkeypatch.setenv("APP_SHOW_ERROR_DETAILS", "1")

    assert Application(root).show_error_details is True


async def test_application_http_exception(app):
    client = TestClient(app)

    response = await client.get("/missing")

    assert response.status == 404
    assert await response.text() == "Not Found"


@pytest.mark.parametrize(
    "status,expected_body",
    [
        (499, b"HTTP 499"),
        (299, b"HTTP 299"),
    ],
)
async def test_application_http_exception_with_any_status(root, status, expected_body):
    async def handler(response, request):
        raise HTTPException(status, "Client closed")

    root.get("/", handler)
    app = Application(root, show_error_details=False)
    mock_send = MockSend()

    await app(get_example_scope("GET", "/"), MockReceive(), mock_send)

    assert mock_send.status == status
    assert mock_send.body == expected_body


@pytest.mark.parametrize("path", ["/hello world", "/café"])
async def test_application_matches_percent_encoded_paths(root, path):
    root.get(path, echo_path)
    app = Application(root)
    scope = get_example_scope("GET", path)

    assert scope["raw_path"] == quote(path).encode()

    for raw_path in (scope["raw_path"], None):
        mock_send = MockSend()
        await app({**scope, "raw_path": raw_path}, MockReceive(), mock_send)

        assert mock_send.status == 200
        assert mock_send.body == quote(path).encode()


async def test_application_serves_a_router(root):
    async def get_cat(response, request):
        response.content = TextContent(params_from(request)["id"])

    root.get("/cats/:id", get_cat)
    client = TestClient(root.router)

    response = await client.get("/cats/42")

    assert response.status == 200
    assert await response.text() == "42"


async def test_application_lifespan(app):
    mock_send = MockSend()
    receive = MockReceive(
        [{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}]
    )

    await app({"type": "lifespan"}, receive, mock_send)

    assert mock_send.messages == [
        {"type": "lifespan.startup.complete"},
        {"type": "lifespan.shutdown.complete"},
    ]


async def test_application_unsupported_scope(app):
    with pytest.raises(TypeError):
        await app({"type": "websocket"}, MockReceive(), MockSend())


async def test_application_request_disconnected(root, caplog):
    root.post("/echo", echo)
    app = Application(root)

    with pytest.raises(MessageAborted):
        await app(
            get_example_scope("POST", "/echo"),
            MockReceive([{"type": "http.disconnect"}]),
            MockSend(),
        )

    assert "aborted" in caplog.text


async def test_access_logging_middleware(root, caplog):
    async def hello(response, request):
        response.content = TextContent("Hello")

    root.with_middleware(access_logging_middleware).get("/hello", hello)
    client = TestClient(root)
    caplog.set_level(logging.DEBUG, logger="minirouter.access")

    response = await client.get("/hello", query={"token": "secret"})

    assert response.status == 200
    assert "/hello?<query is hidden>" in caplog.text
    assert "-> 200" in caplog.text
    assert "secret" not in caplog.text


async def test_access_logging_middleware_logs_exceptions(root, caplog):
    root.with_middleware(access_logging_middleware).get("/crash", crash)
    client = TestClient(Application(root, show_error_details=False))

    response = await client.get("/crash")

    assert response.status == 500
    assert "Unhandled exception while handling: GET /crash" in caplog.text

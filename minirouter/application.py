import traceback
from typing import Optional
from urllib.parse import quote

from minirouter.contents import ASGIContent, TextContent
from minirouter.env import EnvironmentSettings
from minirouter.exceptions import HTTPException, InternalServerError, MessageAborted
from minirouter.logs import get_logged_url, get_logger
from minirouter.messages import Request, Response
from minirouter.scribe import send_asgi_response


class Application:
    """
    ASGI application serving requests with a router, or with a group of routes
    (anything exposing a `serve(response, request)` coroutine).

        root = minirouter.new()
        root.get("/", home)

        app = Application(root)

    This is the only place where exceptions raised by request handlers are caught:
    HTTP exceptions are converted to responses with the matching status, other
    exceptions are logged and converted to 500 Internal Server Error responses.
    """

    def __init__(self, router, *, show_error_details: Optional[bool] = None):
        if show_error_details is None:
            show_error_details = EnvironmentSettings().show_error_details
        self.router = router
        self.show_error_details = show_error_details
        self.logger = get_logger()

    def instantiate_request(self, scope, receive) -> Request:
        request = Request.incoming(
            scope["method"],
            scope.get("raw_path") or quote(scope["path"]).encode(),
            scope.get("query_string", b""),
            list(scope.get("headers", [])),
        )

        request.scope = scope
        request.content = ASGIContent(receive)
        return request

    async def handle(self, request: Request) -> Response:
        response = Response(200)
        try:
            await self.router.serve(response, request)
        except MessageAborted:
            self.logger.warning(
                "The connection was lost or aborted while the request was being "
                "sent. %s %s",
                request.method,
                get_logged_url(request),
            )
            raise
        except HTTPException as http_exception:
            self.logger.info(
                'HTTP %s - "%s %s". %s',
                http_exception.status,
                request.method,
                get_logged_url(request),
                str(http_exception),
            )
            return self.get_http_exception_response(http_exception)
        except Exception as exc:
            self.logger.error(
                'Unhandled exception - "%s %s"',
                request.method,
                get_logged_url(request),
                exc_info=exc,
            )
            return self.get_internal_server_error_response(InternalServerError(exc))
        return response

    def get_http_exception_response(self, http_exception: HTTPException) -> Response:
        response = Response(http_exception.status)
        response.content = TextContent(response.reason)
        return response

    def get_internal_server_error_response(self, error: InternalServerError) -> Response:
        if self.show_error_details and error.source_error is not None:
            exc = error.source_error
            details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            return Response(500, content=TextContent(details))
        return Response(500, content=TextContent("Internal Server Error"))

    async def _handle_lifespan(self, receive, send) -> None:
        message = await receive()
        assert message["type"] == "lifespan.startup"
        await send({"type": "lifespan.startup.complete"})

        message = await receive()
        assert message["type"] == "lifespan.shutdown"
        await send({"type": "lifespan.shutdown.complete"})

    async def _handle_http(self, scope, receive, send) -> None:
        request = self.instantiate_request(scope, receive)
        response = await self.handle(request)
        await send_asgi_response(response, send)

        request.scope = None
        request.content.dispose()

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            return await self._handle_http(scope, receive, send)

        if scope["type"] == "lifespan":
            return await self._handle_lifespan(receive, send)

        raise TypeError(f"Unsupported scope type: {scope['type']}")

"""
This module contains the functions used to compose middlewares around request
handlers.

A request handler is a coroutine function receiving a response and a request:

    async def handler(response: Response, request: Request) -> None: ...

A middleware is a function receiving a request handler and returning a new request
handler, that can do work before and after calling the handler it wraps:

    def timing(next_handler: Handler) -> Handler:
        async def handler(response, request):
            started = time.perf_counter()
            await next_handler(response, request)
            elapsed = time.perf_counter() - started
            response.set_header(b"Server-Timing", f"app;dur={elapsed}".encode())

        return handler
"""

from typing import Awaitable, Callable, Iterable, Sequence, Tuple

from minirouter.messages import Request, Response

Handler = Callable[[Response, Request], Awaitable[None]]
Middleware = Callable[[Handler], Handler]


def get_middlewares_chain(middlewares: Sequence[Middleware], handler: Handler) -> Handler:
    """
    Wraps the given handler with the given middlewares, so that the first middleware
    is the outermost at request time. Each middleware is called once.
    """
    fn = handler
    for middleware in reversed(middlewares):
        fn = middleware(fn)
    return fn


def compose(
    group_middlewares: Sequence[Middleware],
    route_middlewares: Sequence[Middleware],
    handler: Handler,
) -> Handler:
    """
    Wraps a route handler with its own middlewares first, then with the middlewares
    of the group it is registered on. At request time the order is:

        group_middlewares[0] -> ... -> route_middlewares[0] -> ... -> handler
    """
    return get_middlewares_chain(
        group_middlewares, get_middlewares_chain(route_middlewares, handler)
    )


def get_handler_middleware(other_handler: Handler) -> Middleware:
    """
    Returns a middleware that calls the given handler before the wrapped handler,
    with the same response and request. The given handler cannot stop the chain:
    the wrapped handler runs anyway, and sees whatever the first one did to the
    response.
    """

    def middleware(next_handler: Handler) -> Handler:
        async def handler(response: Response, request: Request) -> None:
            await other_handler(response, request)
            await next_handler(response, request)

        return handler

    return middleware


def ensure_middlewares(middlewares: Iterable[Middleware]) -> Tuple[Middleware, ...]:
    values = tuple(middlewares)
    for middleware in values:
        if not callable(middleware):
            raise TypeError(f"Middlewares must be callable, got {middleware!r}")
    return values

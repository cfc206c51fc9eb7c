"""
Groups of routes sharing a base path and a chain of middlewares.

A Group is an immutable value bound to a router. Deriving a group, to add a base
path or middlewares, returns a new Group bound to the same router; the original
group is never modified:

    root = Group.new()
    api = root.with_base_path("/api").with_middleware(auth)
    admin = api.with_base_path("admin").with_middleware(require_admin)

    api.get("/cats/:id", get_cat)         # GET /api/cats/:id -> auth
    admin.delete("/cats/:id", drop_cat)   # DELETE /api/admin/cats/:id
                                          #   -> auth -> require_admin
"""

from typing import Tuple

from minirouter.messages import Request, Response
from minirouter.middlewares import (
    Handler,
    Middleware,
    compose,
    ensure_middlewares,
    get_handler_middleware,
)
from minirouter.routing import Params, RouteMethod, Router, params_from
from minirouter.utils import join_path


class Group:
    __slots__ = ("_router", "_base_path", "_middlewares")

    def __init__(
        self,
        router: Router,
        base_path: str = "",
        middlewares: Tuple[Middleware, ...] = (),
    ) -> None:
        object.__setattr__(self, "_router", router)
        object.__setattr__(self, "_base_path", base_path)
        object.__setattr__(self, "_middlewares", tuple(middlewares))

    @classmethod
    def new(cls) -> "Group":
        """
        Returns a root group, bound to a new strict router: paths are not redirected
        to their variants with or without trailing slash or with different casing,
        and requests for a path registered only for other methods get 404.
        """
        return cls(Router.strict())

    def __setattr__(self, name, value):
        raise AttributeError(f"{self.__class__.__name__} objects are immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{self.__class__.__name__} objects are immutable")

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} base_path={self._base_path!r} "
            f"middlewares={len(self._middlewares)}>"
        )

    @property
    def router(self) -> Router:
        """Returns the router shared by all groups derived from the same root."""
        return self._router

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def middlewares(self) -> Tuple[Middleware, ...]:
        return self._middlewares

    def path(self, path: str) -> str:
        """Returns the full path of a route registered on this group."""
        return join_path(self._base_path, path)

    def with_base_path(self, path: str) -> "Group":
        """
        Returns a new group, for routes under the given path relative to this group
        base path. The new group inherits all middlewares of this group.
        """
        return Group(self._router, self.path(path), self._middlewares)

    def with_middleware(self, *middlewares: Middleware) -> "Group":
        """
        Returns a new group that applies the given middlewares, after the ones of
        this group, to all routes registered on it.
        """
        return Group(
            self._router,
            self._base_path,
            self._middlewares + ensure_middlewares(middlewares),
        )

    def with_handler_middleware(self, handler: Handler) -> "Group":
        """
        Returns a new group that calls the given request handler before the handler
        of each route registered on it, with the same response and request.

        The given handler cannot stop the request: the route handler is called
        anyway, after it. It is meant to set headers or to inspect the request; if
        it sets the response status or content, the route handler can overwrite
        them.
        """
        return self.with_middleware(get_handler_middleware(handler))

    def handle(
        self,
        method: str,
        path: str,
        handler: Handler,
        *middlewares: Middleware,
    ) -> None:
        """
        Registers a request handler for the given method and path, relative to this
        group base path. The handler is wrapped by the given middlewares, and then
        by the middlewares of this group, which run first.
        """
        self._router.register(
            method,
            self.path(path),
            compose(self._middlewares, ensure_middlewares(middlewares), handler),
        )

    handle_func = handle

    def get(self, path: str, handler: Handler, *middlewares: Middleware) -> None:
        self.handle(RouteMethod.GET, path, handler, *middlewares)

    def put(self, path: str, handler: Handler, *middlewares: Middleware) -> None:
        self.handle(RouteMethod.PUT, path, handler, *middlewares)

    def post(self, path: str, handler: Handler, *middlewares: Middleware) -> None:
        self.handle(RouteMethod.POST, path, handler, *middlewares)

    def patch(self, path: str, handler: Handler, *middlewares: Middleware) -> None:
        self.handle(RouteMethod.PATCH, path, handler, *middlewares)

    def delete(self, path: str, handler: Handler, *middlewares: Middleware) -> None:
        self.handle(RouteMethod.DELETE, path, handler, *middlewares)

    def options(self, path: str, handler: Handler, *middlewares: Middleware) -> None:
        self.handle(RouteMethod.OPTIONS, path, handler, *middlewares)

    async def serve(self, response: Response, request: Request) -> None:
        """Dispatches a request to the handler registered for it in the router."""
        await self._router.serve(response, request)


def new() -> Group:
    """Returns a new root group, bound to a new strict router."""
    return Group.new()


def params_of(request: Request) -> Params:
    """
    Returns the route parameters of the given request, by name. Parameters that are
    not defined by the matched route read as empty strings.
    """
    return params_from(request)

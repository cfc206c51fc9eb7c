import posixpath
import re
from collections import defaultdict
from functools import lru_cache
from typing import Any, AnyStr, Dict, Iterator, List, Optional, Tuple, Union
from urllib.parse import quote_from_bytes, unquote_to_bytes

from minirouter.contents import TextContent
from minirouter.logs import get_logger
from minirouter.messages import Request, Response
from minirouter.utils import ensure_bytes, ensure_str


class RouteMethod:
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"


_route_param_rx = re.compile(b"/:([^/]+)")
_route_catch_all_rx = re.compile(b"/\\*([^/]*)$")
_mustache_route_param_rx = re.compile(b"/{([^}]+)}")
_named_group_rx = re.compile(b"\\?P<([^>]+)>")
_param_name_rx = re.compile(b"^[A-Za-z_][A-Za-z0-9_]*$")
_escaped_chars = {b".", b"[", b"]", b"(", b")", b"+", b"?", b"$", b"^", b"|"}
_location_safe_chars = "/:@!$&'()*+,;="


class RouteException(Exception):
    """Base class for routing exceptions."""


class RouteDuplicate(RouteException):
    def __init__(self, method, pattern, current_handler):
        method = ensure_str(method)
        pattern = ensure_str(pattern)
        handler_name = getattr(current_handler, "__qualname__", repr(current_handler))
        super().__init__(
            f"Cannot register the route {method} {pattern} more than once. "
            f"This route is already registered for {handler_name}."
        )
        self.method = method
        self.pattern = pattern
        self.current_handler = current_handler


class InvalidValuePatternName(RouteException):
    def __init__(self, parameter_pattern_name: str, matched_parameter: str) -> None:
        super().__init__(
            f"Invalid value pattern: {parameter_pattern_name} "
            f"for route parameter {matched_parameter}. "
            f"Define a value pattern in the `Route.value_patterns` class "
            f"attribute to configure additional patterns for route values."
        )

        self.parameter_pattern_name = parameter_pattern_name
        self.matched_parameter = matched_parameter


class Params(dict):
    """
    Route parameters extracted from a request path, by name.
    Looking up a parameter that the route does not define returns an empty string.
    """

    def __missing__(self, key: str) -> str:
        return ""

    def by_name(self, name: str) -> str:
        return self[name]


class RouteMatch:
    __slots__ = ("values", "pattern", "handler")

    def __init__(self, route: "Route", values: Optional[Dict[str, bytes]]):
        self.handler = route.handler
        self.pattern = route.pattern
        self.values = Params(
            {k: v.decode("utf8", "replace") for k, v in values.items()}
            if values
            else {}
        )


def _get_parameter_pattern_fragment(
    parameter_name: bytes, value_pattern: bytes = rb"[^\/]+"
) -> bytes:
    if not _param_name_rx.match(parameter_name):
        raise RouteException(
            f"Invalid route parameter name: {parameter_name.decode('utf8')!r}"
        )
    return b"/(?P<" + parameter_name + b">" + value_pattern + b")"


class Route:
    __slots__ = (
        "handler",
        "pattern",
        "param_names",
        "_rx",
        "_ci_rx",
    )

    pattern: bytes

    value_patterns = {
        "string": r"[^\/]+",
        "str": r"[^\/]+",
        "int": r"\d+",
        "float": r"\d+(?:\.\d+)?",
        "uuid": r"[a-zA-Z0-9]{8}-[a-zA-Z0-9]{4}-[a-zA-Z0-9]"
        + r"{4}-[a-zA-Z0-9]{4}-[a-zA-Z0-9]{12}",
    }

    def __init__(self, pattern: Union[str, bytes], handler: Any):
        raw_pattern = ensure_bytes(pattern)
        if not raw_pattern.startswith(b"/"):
            raise RouteException(
                f"Route patterns must begin with '/', got {ensure_str(pattern)!r}"
            )
        self.handler = handler
        self.pattern = raw_pattern
        rx, param_names = self._get_regex_for_pattern(raw_pattern)
        self._rx = rx
        self._ci_rx = None
        self.param_names = [name.decode("utf8") for name in param_names]

    @property
    def rx(self) -> re.Pattern:
        return self._rx

    @property
    def has_params(self) -> bool:
        return self._rx.groups > 0

    @property
    def is_catch_all(self) -> bool:
        return b"*" in self.pattern

    @property
    def signature(self) -> bytes:
        """
        The route regex without parameter names: two routes with the same
        signature match exactly the same paths.
        """
        return _named_group_rx.sub(b"?:", self._rx.pattern)

    def _get_regex_for_pattern(self, pattern: bytes):
        """
        Converts a raw pattern into a compiled regular expression that can be used
        to match bytes URL paths, extracting route parameters.
        """
        for c in _escaped_chars:
            if c in pattern:
                pattern = pattern.replace(c, b"\\" + c)

        if b"*" in pattern:
            if pattern.count(b"*") > 1 or not _route_catch_all_rx.search(pattern):
                raise RouteException(
                    "A catch-all parameter is only allowed once, as the last "
                    f"segment of a route: {pattern.decode('utf8')}"
                )
            pattern = _route_catch_all_rx.sub(self._handle_catch_all, pattern)

        # /api/cats/{cat_id}, also /api/cats/{int:cat_id} or /api/cats/{uuid:cat_id}
        # for more granular control on the generated pattern
        if b"{" in pattern:
            pattern = _mustache_route_param_rx.sub(self._handle_rich_parameter, pattern)

        # route parameters defined using /:name syntax
        if b"/:" in pattern:
            pattern = _route_param_rx.sub(
                lambda match: _get_parameter_pattern_fragment(match.group(1)),
                pattern,
            )

        param_names = []
        for p in _named_group_rx.finditer(pattern):
            param_name = p.group(1)
            if param_name in param_names:
                raise RouteException(
                    f"Cannot have multiple parameters with name: "
                    f"{param_name.decode('utf8')}"
                )

            param_names.append(param_name)

        return re.compile(b"^" + pattern + b"$"), param_names

    @staticmethod
    def _handle_catch_all(match: re.Match) -> bytes:
        # the value of a catch-all parameter keeps its leading slash
        parameter_name = match.group(1) or b"tail"
        if not _param_name_rx.match(parameter_name):
            raise RouteException(
                f"Invalid route parameter name: {parameter_name.decode('utf8')!r}"
            )
        return b"(?P<" + parameter_name + b">/.*)"

    def _handle_rich_parameter(self, match: re.Match):
        """
        Handles a route parameter that can include details about the pattern,
        for example:

        /api/cats/{int:cat_id}
        /api/cats/{uuid:cat_id}
        """
        matched_parameter = match.group(1)

        if b":" in matched_parameter:
            raw_pattern_name, parameter_name = matched_parameter.split(b":", 1)
            parameter_pattern_name = raw_pattern_name.decode()
            parameter_pattern = Route.value_patterns.get(parameter_pattern_name)

            if not parameter_pattern:
                raise InvalidValuePatternName(
                    parameter_pattern_name,
                    matched_parameter.decode("utf8"),
                )

            return _get_parameter_pattern_fragment(
                parameter_name, parameter_pattern.encode()
            )
        return _get_parameter_pattern_fragment(matched_parameter)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} \"{self.pattern.decode('utf8')}\">"

    def match_by_path(self, path: bytes) -> Optional[RouteMatch]:
        if not self.has_params:
            if path == self.pattern:
                return RouteMatch(self, None)
            return None

        match = self._rx.match(path)

        if not match:
            return None

        return RouteMatch(self, match.groupdict())

    def fix_path_case(self, path: bytes) -> Optional[bytes]:
        """
        If the given path matches this route ignoring case, returns the path
        spelled like the route pattern, keeping parameter values as they are.
        """
        if self._ci_rx is None:
            self._ci_rx = re.compile(self._rx.pattern, re.IGNORECASE)

        if not self._ci_rx.match(path):
            return None

        if not self.has_params:
            return self.pattern

        path_parts = path.split(b"/")
        fixed_parts = []

        for index, part in enumerate(self.pattern.split(b"/")):
            if part.startswith(b"*"):
                fixed_parts.extend(path_parts[index:])
                break
            if part.startswith((b":", b"{")):
                fixed_parts.append(path_parts[index])
            else:
                fixed_parts.append(part)
        return b"/".join(fixed_parts)


def clean_path(path: bytes) -> bytes:
    """
    Returns the canonical form of a URL path: double slashes are collapsed and
    "." and ".." segments are resolved. A trailing slash is kept.
    """
    if not path:
        return b"/"
    cleaned = posixpath.normpath(b"/" + path.lstrip(b"/"))
    if path.endswith(b"/") and cleaned != b"/":
        cleaned += b"/"
    return cleaned


async def default_not_found(response: Response, request: Request) -> None:
    response.status = 404
    response.content = TextContent("Not Found")


async def default_method_not_allowed(response: Response, request: Request) -> None:
    response.status = 405
    response.content = TextContent("Method Not Allowed")


def get_redirect_handler(location: bytes, status: int):
    async def redirect(response: Response, request: Request) -> None:
        response.status = status
        response.set_header(b"Location", location)

    return redirect


def params_from(request: Request) -> Params:
    """
    Returns the route parameters the router attached to the given request.
    """
    values = getattr(request, "route_values", None)
    if values is None:
        return Params()
    return values


class Router:
    """
    Path based router, matching requests by HTTP method and path.

    Unlike most web frameworks routers, this router can be configured to be
    strict: when `redirect_trailing_slash`, `redirect_fixed_path` and
    `handle_method_not_allowed` are all disabled, a request either matches a
    registered route exactly, or it is handled by the `not_found` handler.

    Routes are matched against the percent-decoded request path. Parameter names
    must be identifiers: `/files/:name.json` is rejected, the parameter must take
    the whole segment (`/files/:name`) and the handler can check the extension.
    """

    def __init__(
        self,
        *,
        redirect_trailing_slash: bool = True,
        redirect_fixed_path: bool = True,
        handle_method_not_allowed: bool = True,
    ):
        self.redirect_trailing_slash = redirect_trailing_slash
        self.redirect_fixed_path = redirect_fixed_path
        self.handle_method_not_allowed = handle_method_not_allowed
        self.not_found = default_not_found
        self.method_not_allowed = default_method_not_allowed
        self.routes: Dict[str, List[Route]] = defaultdict(list)
        self._map: Dict[str, Dict[bytes, Route]] = defaultdict(dict)
        self.get_match = lru_cache(maxsize=1200)(self._get_match)
        self.logger = get_logger()

    @classmethod
    def strict(cls) -> "Router":
        return cls(
            redirect_trailing_slash=False,
            redirect_fixed_path=False,
            handle_method_not_allowed=False,
        )

    def __iter__(self) -> Iterator[Tuple[str, Route]]:
        for method, routes in self.routes.items():
            for route in routes:
                yield method, route

    def register(self, method: str, pattern: AnyStr, handler: Any) -> Route:
        """
        Registers a request handler for the given HTTP method and route pattern.
        Raises RouteDuplicate if an equivalent route is already registered for the
        same method.
        """
        if not method:
            raise RouteException("HTTP method must not be empty")

        new_route = Route(pattern, handler)
        method_routes = self._map[method]
        current_route = method_routes.get(new_route.signature)

        if current_route is not None:
            raise RouteDuplicate(method, new_route.pattern, current_route.handler)

        method_routes[new_route.signature] = new_route
        self.routes[method].append(new_route)
        self._sort_routes(method)
        self.get_match.cache_clear()

        self.logger.debug("Registered route %s %s", method, new_route.pattern.decode())
        return new_route

    def _sort_routes(self, method: str) -> None:
        """
        Sorts the routes of a method so that static routes are tried first, then
        routes by number of parameters ascending; catch-all routes are tried last.
        """
        self.routes[method].sort(
            key=lambda route: (
                route.is_catch_all,
                len(route.param_names),
                -route.pattern.count(b"/"),
            )
        )

    def _get_match(self, method: str, path: bytes) -> Optional[RouteMatch]:
        for route in self.routes.get(method, ()):
            match = route.match_by_path(path)
            if match:
                return match
        return None

    def get_allowed_methods(self, path: bytes, exclude: str = "") -> List[str]:
        return sorted(
            method
            for method in self.routes
            if method != exclude and self.get_match(method, path) is not None
        )

    def _get_fixed_path(self, method: str, path: bytes) -> Optional[bytes]:
        candidates = [path]
        if self.redirect_trailing_slash and path != b"/":
            candidates.append(path[:-1] if path.endswith(b"/") else path + b"/")

        for candidate in candidates:
            for route in self.routes.get(method, ()):
                fixed_path = route.fix_path_case(candidate)
                if fixed_path is not None:
                    return fixed_path
        return None

    def _redirect(self, request: Request, path: bytes):
        status = 301 if request.method == RouteMethod.GET else 308
        location = quote_from_bytes(path, _location_safe_chars).encode()
        if request._raw_query:
            location = location + b"?" + request._raw_query
        return get_redirect_handler(location, status)

    def dispatch(self, request: Request):
        """
        Returns the request handler for the given request, attaching route
        parameters to the request. When no route matches, returns a handler
        producing a redirect, a 405 Method Not Allowed or a 404 Not Found response,
        depending on the router configuration.
        """
        method = request.method
        # routes match the decoded path, like their parameter values
        path = unquote_to_bytes(request._path or b"/")
        match = self.get_match(method, path)

        if match is not None:
            request.route_values = Params(match.values)
            return match.handler

        if method != RouteMethod.CONNECT and path != b"/":
            if self.redirect_trailing_slash:
                alternative = path[:-1] if path.endswith(b"/") else path + b"/"
                if self.get_match(method, alternative) is not None:
                    return self._redirect(request, alternative)

            if self.redirect_fixed_path:
                fixed_path = self._get_fixed_path(method, clean_path(path))
                if fixed_path is not None and fixed_path != path:
                    return self._redirect(request, fixed_path)

        if self.handle_method_not_allowed:
            allowed = self.get_allowed_methods(path, exclude=method)
            if allowed:
                return self._get_method_not_allowed_handler(allowed)

        return self.not_found

    def _get_method_not_allowed_handler(self, allowed: List[str]):
        allow_value = ", ".join(allowed).encode()
        method_not_allowed = self.method_not_allowed

        async def handler(response: Response, request: Request) -> None:
            response.set_header(b"Allow", allow_value)
            await method_not_allowed(response, request)

        return handler

    async def serve(self, response: Response, request: Request) -> None:
        handler = self.dispatch(request)
        await handler(response, request)

    params_from = staticmethod(params_from)

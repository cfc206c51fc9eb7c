from typing import Dict, List, Sequence, Tuple, Union
from urllib.parse import quote, urlencode

HeadersType = Union[None, Sequence[Tuple[bytes, bytes]], Dict[str, str]]
QueryType = Union[None, bytes, str, dict, list]


def _get_tuple(value: Union[List, Tuple[str, int]]) -> Tuple[str, int]:
    if isinstance(value, tuple):
        return value
    assert len(value) == 2
    return tuple(value)  # type: ignore


def get_example_scope(
    method: str,
    path: str,
    extra_headers: HeadersType = None,
    *,
    query: QueryType = None,
    scheme: str = "http",
    server: Union[None, List, Tuple[str, int]] = None,
    client: Union[None, List, Tuple[str, int]] = None,
):
    """Returns a mocked ASGI scope"""
    if "?" in path:
        raise ValueError(
            "The path in ASGI messages does not contain query string, "
            "use the `query` parameter"
        )

    server = ("127.0.0.1", 8000) if server is None else _get_tuple(server)
    client = ("127.0.0.1", 51492) if client is None else _get_tuple(client)

    server_port = server[1]
    if (scheme == "http" and server_port == 80) or (
        scheme == "https" and server_port == 443
    ):
        host = server[0]
    else:
        host = f"{server[0]}:{server_port}"

    if isinstance(extra_headers, dict):
        extra_headers = [
            (key.encode(), value.encode()) for key, value in extra_headers.items()
        ]

    query_string: bytes = b""
    if query:
        if isinstance(query, list):
            query = dict(query)
        if isinstance(query, dict):
            query_string = urlencode(query).encode()
        if isinstance(query, str):
            query_string = query.encode()
        if isinstance(query, bytes):
            query_string = query

    headers = [(b"host", host.encode())] + (
        [tuple(header) for header in extra_headers] if extra_headers else []
    )

    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "server": tuple(server),
        "client": client,
        "scheme": scheme,
        "method": method,
        "root_path": "",
        "path": path,
        "raw_path": quote(path).encode(),
        "query_string": query_string,
        "headers": headers,
    }

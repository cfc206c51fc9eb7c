from typing import AnyStr


def ensure_bytes(value: AnyStr) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf8")
    raise ValueError("Expected bytes or str")


def ensure_str(value: AnyStr) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode()
    raise ValueError("Expected bytes or str")


def join_path(base_path: str, path: str) -> str:
    """
    Joins a group base path with a path fragment.

    An empty fragment returns the base path as-is. Otherwise a single trailing
    slash is removed from the base path and the fragment is made to start with a
    slash. Trailing slashes in the fragment are kept, and nothing else is
    normalized: double slashes, percent-encoding and parameter syntax are left
    to the router.

        join_path("", "foo")        -> "/foo"
        join_path("/base", "foo/")  -> "/base/foo/"
        join_path("/base", "")      -> "/base"
    """
    if not path:
        return base_path

    if base_path.endswith("/"):
        base_path = base_path[:-1]

    if not path.startswith("/"):
        path = "/" + path

    return base_path + path


def truthy(value: str, default: bool = False) -> bool:
    if not value:
        return default
    return value.upper() in {"1", "TRUE"}

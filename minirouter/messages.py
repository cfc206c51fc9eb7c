import http
import re
from json.decoder import JSONDecodeError
from typing import Optional
from urllib.parse import parse_qs

from .contents import Content
from .exceptions import BadRequest, BadRequestFormat
from .settings import json_settings
from .url import URL

_charset_rx = re.compile(rb"charset=([\w\-]+)", re.I)


def parse_charset(value: bytes):
    m = _charset_rx.search(value)
    if m:
        return m.group(1).decode("ascii")
    return None


class Message:
    def __init__(self, headers):
        self._raw_headers = headers or []

    @property
    def headers(self):
        return list(self._raw_headers)

    def get_first_header(self, key: bytes):
        key = key.lower()
        for header in self._raw_headers:
            if header[0].lower() == key:
                return header[1]

    def get_headers(self, key: bytes):
        results = []
        key = key.lower()
        for header in self._raw_headers:
            if header[0].lower() == key:
                results.append(header[1])
        return results

    def remove_header(self, key: bytes):
        key = key.lower()
        self._raw_headers[:] = [
            header for header in self._raw_headers if header[0].lower() != key
        ]

    def has_header(self, key: bytes) -> bool:
        key = key.lower()
        return any(existing_key.lower() == key for existing_key, _ in self._raw_headers)

    def add_header(self, key: bytes, value: bytes):
        self._raw_headers.append((key, value))

    def set_header(self, key: bytes, value: bytes):
        self.remove_header(key)
        self._raw_headers.append((key, value))

    def content_type(self):
        if getattr(self, "content", None) and self.content.type:
            return self.content.type
        return self.get_first_header(b"content-type")

    async def read(self) -> Optional[bytes]:
        if getattr(self, "content", None):
            return await self.content.read()
        return None

    async def text(self) -> str:
        body = await self.read()
        if body is None:
            return ""
        return body.decode(self.charset)

    def declares_content_type(self, type: bytes) -> bool:
        content_type = self.content_type()
        if not content_type:
            return False
        return type.lower() in content_type.lower()

    def declares_json(self) -> bool:
        return self.declares_content_type(b"json")

    async def json(self, loads=None):
        if not self.declares_json():
            return None
        text = await self.text()
        if not text:
            return None
        try:
            return (loads or json_settings.loads)(text)
        except JSONDecodeError as decode_error:
            raise BadRequestFormat(
                f"Declared Content-Type is {self.content_type().decode()} but "
                f"the content cannot be parsed as JSON.",
                decode_error,
            )

    @property
    def charset(self) -> str:
        content_type = self.content_type()
        if content_type:
            return parse_charset(content_type) or "utf8"
        return "utf8"


class Request(Message):
    def __init__(self, method: str, url: Optional[bytes], headers):
        _url = URL(url) if url else None
        self._raw_headers = headers or []
        self.method = method
        self._url = _url
        if _url:
            self._path = _url.path
            self._raw_query = _url.query
        else:
            self._path = None
            self._raw_query = None
        self.scope = None
        self.route_values = None
        self.content: Optional[Content] = None

    @classmethod
    def incoming(cls, method: str, path: bytes, query: bytes, headers):
        request = cls(method, None, headers)
        request._path = path
        request._raw_query = query
        return request

    @property
    def path(self) -> str:
        return self._path.decode("utf8") if self._path else ""

    @property
    def host(self) -> str:
        host_header = self.get_first_header(b"host")
        if host_header is None:
            raise BadRequest("Missing Host header")
        return host_header.decode()

    @property
    def query(self):
        if self._raw_query:
            return parse_qs(self._raw_query.decode("utf8"))
        return {}

    @property
    def url(self) -> URL:
        if self._url:
            return self._url
        if self._raw_query:
            self._url = URL(self._path + b"?" + self._raw_query)
        else:
            self._url = URL(self._path)
        return self._url

    def __repr__(self):
        return f"<Request {self.method} {self.url.value.decode()}>"


class Response(Message):
    """
    An HTTP response. Request handlers receive one as their response sink and
    configure it in place: status, headers and content.
    """

    def __init__(self, status: int = 200, headers=None, content: Content = None):
        self._raw_headers = headers or []
        self.status = status
        self.content = content

    def __repr__(self):
        return f"<Response {self.status}>"

    @property
    def reason(self) -> str:
        try:
            return http.HTTPStatus(self.status).phrase
        except ValueError:
            return f"HTTP {self.status}"

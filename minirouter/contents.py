from typing import Optional

from .exceptions import MessageAborted
from .settings import json_settings


class Content:
    def __init__(self, content_type: Optional[bytes], data: bytes):
        self.type = content_type
        self.body = data
        self.length = len(data)

    async def read(self) -> bytes:
        return self.body

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.type!r} ({self.length} bytes)>"


class ASGIContent(Content):
    """
    Request body read lazily from the ASGI receive callable, the first time a
    handler asks for it.
    """

    def __init__(self, receive):
        self.type = None
        self.body = None
        self.length = -1
        self.receive = receive

    def dispose(self):
        self.receive = None
        self.body = None

    async def read(self) -> bytes:
        if self.body is not None:
            return self.body
        value = bytearray()
        while True:
            message = await self.receive()
            if message.get("type") == "http.disconnect":
                raise MessageAborted()
            value.extend(message.get("body", b""))
            if not message.get("more_body"):
                break
        self.body = bytes(value)
        self.length = len(self.body)
        return self.body


class TextContent(Content):
    def __init__(self, text: str):
        super().__init__(b"text/plain; charset=utf-8", text.encode("utf8"))


class JSONContent(Content):
    def __init__(self, data, dumps=None):
        dumps = dumps or json_settings.dumps
        super().__init__(b"application/json", dumps(data).encode("utf8"))

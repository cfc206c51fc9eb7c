import asyncio
from typing import Any, Dict, List, Optional, Union

MessageType = Union[bytes, Dict[str, Any]]


class MockReceive:
    """
    Class used to mock the messages received by an ASGI application from the ASGI
    server.

    Example:

        MockReceive([b'{"name":"Celine"}'])

    Simulates the ASGI server sending this kind of message:

        {
            "body": b'{"name":"Celine"}',
            "type": "http.request",
            "more_body": False
        }
    """

    def __init__(self, messages: Optional[List[MessageType]] = None):
        self.messages = messages or []
        self.index = 0

    async def __call__(self):
        try:
            message = self.messages[self.index]
        except IndexError:
            message = b""
        else:
            self.index += 1

        if isinstance(message, dict):
            return message

        await asyncio.sleep(0)
        return {
            "body": message,
            "type": "http.request",
            "more_body": (
                False if (len(self.messages) == self.index or not message) else True
            ),
        }


class MockSend:
    """
    Class used to mock the `send` calls of an ASGI application.
    Use this class to inspect the messages sent by the application.
    """

    def __init__(self):
        self.messages = []

    async def __call__(self, message):
        self.messages.append(message)

    @property
    def status(self) -> Optional[int]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message["status"]
        return None

    @property
    def headers(self) -> Dict[bytes, bytes]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return {key.lower(): value for key, value in message["headers"]}
        return {}

    @property
    def body(self) -> bytes:
        return b"".join(
            message.get("body", b"")
            for message in self.messages
            if message["type"] == "http.response.body"
        )

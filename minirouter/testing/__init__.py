from minirouter.contents import JSONContent, TextContent
from minirouter.testing.client import TestClient
from minirouter.testing.helpers import get_example_scope
from minirouter.testing.messages import MockReceive, MockSend

__all__ = [
    "TestClient",
    "JSONContent",
    "TextContent",
    "MockReceive",
    "MockSend",
    "get_example_scope",
]

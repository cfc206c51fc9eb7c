from .contents import Content
from .messages import Response

MAX_RESPONSE_CHUNK_SIZE = 61440  # 64kb


def set_headers_for_response_content(message: Response):
    content = message.content
    if not content:
        message.add_header(b"content-length", b"0")
        return
    message.add_header(b"content-type", content.type or b"application/octet-stream")
    message.add_header(b"content-length", str(content.length).encode())


def get_chunks(data: bytes):
    for index in range(0, len(data), MAX_RESPONSE_CHUNK_SIZE):
        yield data[index : index + MAX_RESPONSE_CHUNK_SIZE]


async def send_asgi_response(response: Response, send):
    content: Content = response.content
    set_headers_for_response_content(response)
    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": response._raw_headers,
        }
    )
    if content and content.length > MAX_RESPONSE_CHUNK_SIZE:
        chunks = list(get_chunks(content.body))
        for index, chunk in enumerate(chunks):
            await send(
                {
                    "type": "http.response.body",
                    "body": chunk,
                    "more_body": index < len(chunks) - 1,
                }
            )
    else:
        await send(
            {
                "type": "http.response.body",
                "body": content.body if content else b"",
                "more_body": False,
            }
        )

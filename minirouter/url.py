from urllib.parse import urlparse


class InvalidURL(Exception):
    def __init__(self, message: str):
        super().__init__(message)


def valid_schema(schema):
    if schema and schema != "https" and schema != "http":
        raise InvalidURL(f"Expected http or https schema; got instead {schema}")


class URL:
    def __init__(self, value: bytes):
        if not value:
            raise InvalidURL("Input empty or null.")
        try:
            parsed = urlparse(value.decode())
        except Exception:
            raise InvalidURL(f"The value cannot be parsed as URL ({value!r})")
        schema = parsed.scheme
        valid_schema(schema)
        self.value = value
        self.schema = schema.encode() if schema else None
        self.host = parsed.hostname.encode() if parsed.hostname else None
        self.port = parsed.port or 0
        self.path = parsed.path.encode() or b""
        self.query = parsed.query.encode() if parsed.query else None
        self.fragment = parsed.fragment.encode() if parsed.fragment else None
        self.is_absolute = bool(parsed.scheme)

    def __repr__(self):
        return f"<URL {self.value}>"

    def __str__(self):
        return self.value.decode()

    def __eq__(self, other):
        if isinstance(other, URL):
            return self.value == other.value
        return NotImplemented

"""
Process wide serialization settings, used by JSON contents and by
Request.json().
"""

import json
from typing import Any, Callable

from essentials.json import dumps as essentials_dumps


def compact_json_dumps(obj: Any) -> str:
    return essentials_dumps(obj, separators=(",", ":"))


class JSONSettings:
    def __init__(self) -> None:
        self.reset()

    def use(
        self,
        loads: Callable[[str], Any] = json.loads,
        dumps: Callable[[Any], str] = compact_json_dumps,
    ) -> None:
        """
        Configures the functions used to parse and serialize JSON, for example to
        use orjson instead of the built-in module.
        """
        self._loads = loads
        self._dumps = dumps

    def reset(self) -> None:
        self.use()

    def loads(self, text: str) -> Any:
        return self._loads(text)

    def dumps(self, obj: Any) -> str:
        return self._dumps(obj)


json_settings = JSONSettings()

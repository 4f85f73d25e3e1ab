import json
from dataclasses import dataclass
from typing import Any


@dataclass
class Request:
    method: str
    path: str
    headers: dict[str, str]
    query_params: dict[str, list]
    body: bytes
    version: str

    def __post_init__(self):
        try:
            parsed = json.loads(self.body) if self.body else None
        except (json.JSONDecodeError, UnicodeDecodeError):
            parsed = None
        self._dict = parsed if isinstance(parsed, dict) else None

    def has(self, field: str) -> bool:
        if not field:
            raise ValueError("Field cannot be empty")

        if field in self.query_params:
            return True

        return bool(self._dict) and field in self._dict

    def get(self, field: str, default: Any = None) -> Any:
        if not field:
            raise ValueError("Field cannot be empty")

        if field in self.query_params and self.query_params[field]:
            return self.query_params[field][0]

        if self._dict and field in self._dict:
            return self._dict[field]

        return default

    def get_int(self, field: str, default: int) -> int:
        """Integer parameter; ValueError if present but not an integer."""
        value = self.get(field)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError(f"'{field}' must be an integer, got {value!r}") from None

    def get_bool(self, field: str, default: bool = False) -> bool:
        value = self.get(field)
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            return value
        return str(value).lower() in ("1", "true", "yes", "on")

    def get_list(self, field: str) -> list[str]:
        """Comma-separated (query) or array (JSON body) parameter."""
        value = self.get(field)
        if not value:
            return []
        if isinstance(value, list):
            return [str(v) for v in value if v]
        return [v for v in str(value).split(",") if v]

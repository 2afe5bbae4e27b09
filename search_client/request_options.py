import json
from typing import Any, Dict, Optional
from urllib.parse import urlencode
from pydantic import BaseModel, Field

GZIP_ENCODING = "gzip"

class RequestOptions(BaseModel):
    headers: Dict[str, str] = Field(default_factory=dict)
    params: Dict[str, Any] = Field(default_factory=dict, description="Query string parameters")
    data: Dict[str, Any] = Field(default_factory=dict, description="Extra fields merged into the JSON body")
    timeout: Optional[float] = Field(default=None, gt=0)
    connect_timeout: Optional[float] = Field(default=None, gt=0)
    compression: Optional[str] = Field(default=None)

    @classmethod
    def create(cls, opts: Optional[Dict[str, Any]] = None, compression: Optional[str] = None) -> "RequestOptions":
        """
        Split a caller's per-call options into headers, query params, timeouts and body data
        """
        opts = dict(opts or {})
        headers = {str(key): str(value) for key, value in (opts.pop("headers", None) or {}).items()}
        params = dict(opts.pop("params", None) or {})
        timeout = opts.pop("timeout", None)
        connect_timeout = opts.pop("connect_timeout", None)
        compression = opts.pop("compression", compression)

        return cls(
            headers=headers,
            params=params,
            data=opts,
            timeout=timeout,
            connect_timeout=connect_timeout,
            compression=compression,
        )


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def encode_params(params: Dict[str, Any]) -> str:
    """Render query parameters, skipping the ones set to None"""
    return urlencode({key: _encode_value(value) for key, value in params.items() if value is not None})


def build_path(path: str, params: Dict[str, Any]) -> str:
    query = encode_params(params)
    if not query:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{query}"

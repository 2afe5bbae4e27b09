import aiohttp
import asyncio
import logging
from typing import Dict, Optional, Protocol, Union
from pydantic import BaseModel, Field
from .hosts import StatefulHost

logger = logging.getLogger(__name__)

class HttpResponse(BaseModel):
    status: Optional[int] = Field(default=None, description="HTTP status, None when no response was received")
    body: Union[bytes, str] = Field(default="", description="Raw payload of a 2xx response")
    charset: str = Field(default="utf-8")
    error: str = Field(default="", description="Body of a non-2xx response, or the local error message")
    has_timed_out: bool = Field(default=False)
    network_failure: bool = Field(default=False)


class Requester(Protocol):
    async def send_request(
        self,
        host: StatefulHost,
        method: str,
        path: str,
        body: Optional[str],
        headers: Dict[str, str],
        timeout: float,
        connect_timeout: float,
    ) -> HttpResponse:
        ...


class AiohttpRequester:
    """
    Sends single attempts over a shared aiohttp session
    """

    def __init__(self):
        self._http_session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        """Open the HTTP session"""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession()

    async def close(self):
        """Cleanup resources"""
        if self._http_session:
            await self._http_session.close()
            self._http_session = None

    async def send_request(
        self,
        host: StatefulHost,
        method: str,
        path: str,
        body: Optional[str],
        headers: Dict[str, str],
        timeout: float,
        connect_timeout: float,
    ) -> HttpResponse:
        if self._http_session is None:
            await self.start()

        url = f"{host.base_url}{path}"
        client_timeout = aiohttp.ClientTimeout(total=timeout, sock_connect=connect_timeout)
        logger.debug("%s %s (timeout=%ss, connect_timeout=%ss)", method.upper(), url, timeout, connect_timeout)

        try:
            async with self._http_session.request(
                method=method.upper(),
                url=url,
                data=body,
                headers=headers,
                timeout=client_timeout
            ) as response:
                raw = await response.read()
                charset = response.charset or "utf-8"
                if 200 <= response.status < 300:
                    # Decoded by the transport, so that a bad payload surfaces as DecodeError
                    return HttpResponse(status=response.status, body=raw, charset=charset)
                return HttpResponse(status=response.status, error=self._decode_error(raw, charset))
        except asyncio.TimeoutError:
            return HttpResponse(has_timed_out=True, error=f"Request to {host.url} timed out after {timeout}s")
        except aiohttp.ClientError as e:
            return HttpResponse(network_failure=True, error=f"Request to {host.url} failed: {e}")

    @staticmethod
    def _decode_error(raw: bytes, charset: str) -> str:
        """Error bodies are only used for messages, undecodable bytes are replaced"""
        try:
            return raw.decode(charset, errors="replace")
        except LookupError:
            return raw.decode("utf-8", errors="replace")

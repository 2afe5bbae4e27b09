import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional
from pydantic import BaseModel
from .config import ClientConfig
from .exceptions import DeadlineExceededError, DecodeError, HttpError, UnreachableHostsError
from .hosts import CallType
from .metrics import MetricsCollector
from .request_options import GZIP_ENCODING, RequestOptions, build_path
from .requester import HttpResponse, Requester
from .retry_strategy import RetryOutcome, RetryStrategy

logger = logging.getLogger(__name__)

class WireRequest(BaseModel):
    method: str
    path: str
    body: Optional[str] = None
    headers: Dict[str, str]


class Transport:
    """
    Turns one logical call into a sequence of attempts against the tryable hosts
    """

    def __init__(
        self,
        config: ClientConfig,
        requester: Requester,
        metrics: Optional[MetricsCollector] = None,
        retry_strategy: Optional[RetryStrategy] = None
    ):
        self.config = config
        self.requester = requester
        self.metrics = metrics or MetricsCollector(config.app_id)
        self.retry_strategy = retry_strategy or RetryStrategy(config.hosts, config.retry)

    async def read(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        opts: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None
    ) -> Dict[str, Any]:
        return await self.request(CallType.READ, method, path, body, opts, deadline)

    async def write(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        opts: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None
    ) -> Dict[str, Any]:
        return await self.request(CallType.WRITE, method, path, body, opts, deadline)

    async def request(
        self,
        call_type: CallType,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        opts: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Execute a call, failing over across hosts until one gives a final answer.

        ``deadline`` bounds the whole call in seconds. When it elapses the in-flight
        attempt is cancelled and no other host is tried.
        """
        start_time = time.time()
        self.metrics.record_request(call_type.value)

        try:
            if deadline is None:
                result = await self._execute(call_type, method, path, body, opts)
            else:
                try:
                    result = await asyncio.wait_for(
                        self._execute(call_type, method, path, body, opts),
                        timeout=deadline
                    )
                except asyncio.TimeoutError:
                    raise DeadlineExceededError(method.upper(), path, deadline) from None
        except Exception:
            self.metrics.record_failure(call_type.value, time.time() - start_time)
            raise

        self.metrics.record_success(call_type.value, time.time() - start_time)
        return result

    async def _execute(
        self,
        call_type: CallType,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]],
        opts: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        request_options = RequestOptions.create(opts, compression=self.config.compression)
        data = {**(body or {}), **request_options.data}
        request = self._build_request(method, path, data, request_options)

        attempted = []
        for host in self.retry_strategy.get_tryable_hosts(call_type):
            # Hosts that already failed get proportionally more time
            multiplier = self.retry_strategy.attempt_multiplier(host)
            timeout = (request_options.timeout or self.config.get_timeout(call_type)) * multiplier
            connect_timeout = (request_options.connect_timeout or self.config.connect_timeout) * multiplier

            response = await self.requester.send_request(
                host,
                request.method,
                request.path,
                request.body,
                request.headers,
                timeout,
                connect_timeout
            )
            attempted.append(host.url)

            outcome = self.retry_strategy.decide(host, response.status, response.has_timed_out)
            self.metrics.record_attempt(host.url, outcome.value, self.retry_strategy.is_up(host))

            if outcome == RetryOutcome.SUCCESS:
                return self._decode_body(response)
            if outcome == RetryOutcome.FAILURE:
                raise self._build_http_error(response)

            logger.warning(
                "Attempt %s %s on %s failed (%s), trying next host",
                request.method, request.path, host.url, self._describe(response)
            )

        self.metrics.record_exhausted(call_type.value)
        logger.error("All hosts failed for %s %s: %s", request.method, request.path, attempted)
        raise UnreachableHostsError(request.method, request.path, attempted)

    def _build_request(
        self,
        method: str,
        path: str,
        data: Dict[str, Any],
        request_options: RequestOptions
    ) -> WireRequest:
        method = method.upper()
        if not data and method == "GET":
            encoded_body = None
        else:
            encoded_body = json.dumps(data)

        return WireRequest(
            method=method,
            path=build_path(path, request_options.params),
            body=encoded_body,
            headers=self._build_headers(request_options)
        )

    def _build_headers(self, request_options: RequestOptions) -> Dict[str, str]:
        headers = self.config.build_headers()
        headers.update(request_options.headers)
        if request_options.compression == GZIP_ENCODING:
            headers["Accept-Encoding"] = GZIP_ENCODING
        return headers

    @staticmethod
    def _decode_body(response: HttpResponse) -> Dict[str, Any]:
        body = response.body
        if isinstance(body, bytes):
            try:
                body = body.decode(response.charset)
            except (UnicodeDecodeError, LookupError) as e:
                raise DecodeError(body.decode("utf-8", errors="replace"), str(e)) from e
        if not body:
            return {}
        try:
            decoded = json.loads(body)
        except json.JSONDecodeError as e:
            raise DecodeError(body, str(e)) from e
        if not isinstance(decoded, dict):
            raise DecodeError(body, f"expected a JSON object, got {type(decoded).__name__}")
        return decoded

    @staticmethod
    def _build_http_error(response: HttpResponse) -> HttpError:
        """Parse an error body, falling back to the raw text when it is not JSON"""
        raw = response.error
        message = raw
        try:
            decoded = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            decoded = None
        if isinstance(decoded, dict) and "message" in decoded:
            message = str(decoded["message"])
        return HttpError(response.status, message)

    @staticmethod
    def _describe(response: HttpResponse) -> str:
        if response.has_timed_out:
            return "timed out"
        if response.status is None:
            return response.error or "no response"
        return f"status {response.status}"

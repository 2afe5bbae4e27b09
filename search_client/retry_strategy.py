import logging
import threading
import time
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Any
from pydantic import BaseModel, Field
from .hosts import CallType, StatefulHost

logger = logging.getLogger(__name__)

class RetryOutcome(str, Enum):
    SUCCESS = "success"
    RETRY = "retry"
    FAILURE = "failure"

class RetryConfig(BaseModel):
    host_down_ttl: float = Field(default=300.0, gt=0, description="Seconds a quarantined host stays down")
    failure_threshold: int = Field(default=2, ge=1, description="Consecutive failures before a host is quarantined")


def classify(status_code: Optional[int] = None, is_timed_out: bool = False) -> RetryOutcome:
    """Classify a single attempt, without touching any host state.

    Timeouts, redirects, server errors and missing status codes are transient.
    Only 4xx responses are final failures since the request itself is invalid.
    """
    if is_timed_out:
        return RetryOutcome.RETRY
    if status_code is not None and 200 <= status_code < 300:
        return RetryOutcome.SUCCESS
    if status_code is not None and 400 <= status_code < 500:
        return RetryOutcome.FAILURE
    return RetryOutcome.RETRY


class RetryStrategy:
    """Ranks the hosts of one client and learns their health from attempt outcomes.

    The strategy owns private copies of the hosts it is given, so two clients
    built from the same configuration never share health state. All reads and
    writes of host state happen under a single lock, which makes a strategy safe
    to share between concurrent calls, threads included.
    """

    def __init__(
        self,
        hosts: Iterable[StatefulHost],
        config: Optional[RetryConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or RetryConfig()
        self._hosts: List[StatefulHost] = [host.model_copy() for host in hosts]
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def hosts(self) -> List[StatefulHost]:
        return list(self._hosts)

    def get_tryable_hosts(self, call_type: CallType) -> List[StatefulHost]:
        """Hosts accepting ``call_type`` that may be tried now, in priority order.

        Never empty as long as one host accepts the call type: when every such
        host is quarantined they are all reset and returned.
        """
        with self._lock:
            now = self._clock()
            candidates = [host for host in self._hosts if host.accepts(call_type)]

            for host in candidates:
                if host.has_expired(self.config.host_down_ttl, now):
                    logger.info("Host %s recovered after %.0fs down", host.url, now - host.last_use)
                    host.reset()

            tryable = [host for host in candidates if host.up]
            if tryable:
                return tryable

            if candidates:
                logger.warning(
                    "All %d %s hosts are down, trying all of them anyway",
                    len(candidates), call_type.value
                )
            for host in candidates:
                host.reset()
            return candidates

    def decide(
        self,
        host: StatefulHost,
        status_code: Optional[int] = None,
        is_timed_out: bool = False,
    ) -> RetryOutcome:
        """Classify an attempt against ``host`` and update the host accordingly"""
        outcome = classify(status_code, is_timed_out)

        with self._lock:
            host.last_use = self._clock()

            if outcome == RetryOutcome.SUCCESS:
                host.up = True
                host.retry_count = 0
            elif outcome == RetryOutcome.RETRY:
                host.retry_count += 1
                if host.up and host.retry_count >= self.config.failure_threshold:
                    host.up = False
                    logger.warning(
                        "Host %s marked down after %d consecutive failures",
                        host.url, host.retry_count
                    )

        return outcome

    def attempt_multiplier(self, host: StatefulHost) -> int:
        """Factor applied to the base timeouts of the next attempt against ``host``"""
        with self._lock:
            return host.retry_count + 1

    def is_up(self, host: StatefulHost) -> bool:
        with self._lock:
            return host.up

    def host_states(self) -> List[Dict[str, Any]]:
        """Snapshot of every host's health, for monitoring"""
        with self._lock:
            return [
                {
                    "url": host.url,
                    "accept": sorted(call_type.value for call_type in host.accept),
                    "up": host.up,
                    "last_use": host.last_use,
                    "retry_count": host.retry_count,
                }
                for host in self._hosts
            ]

import random
import time
from enum import Enum
from typing import FrozenSet, List, Optional
from pydantic import BaseModel, Field

class CallType(str, Enum):
    READ = "read"
    WRITE = "write"

READ_ONLY: FrozenSet[CallType] = frozenset({CallType.READ})
WRITE_ONLY: FrozenSet[CallType] = frozenset({CallType.WRITE})
READ_WRITE: FrozenSet[CallType] = frozenset({CallType.READ, CallType.WRITE})

PRIMARY_DOMAIN = "algolia.net"
FALLBACK_DOMAIN = "algolianet.com"
FALLBACK_HOSTS_COUNT = 3


class StatefulHost(BaseModel):
    """A host of the API together with what this client has learned about its health.

    Identity (url, protocol, accept) is fixed at configuration time. Health state
    (up, last_use, retry_count) is only ever mutated by the RetryStrategy owning
    the host.
    """
    url: str = Field(..., description="Host name, including the application subdomain")
    protocol: str = Field(default="https://")
    accept: FrozenSet[CallType] = Field(default=READ_WRITE, description="Call types routed to this host")
    up: bool = Field(default=True)
    last_use: float = Field(default_factory=time.time, description="Epoch seconds of the last state change")
    retry_count: int = Field(default=0, ge=0, description="Consecutive failed attempts since last success")

    @property
    def base_url(self) -> str:
        return f"{self.protocol}{self.url}"

    def accepts(self, call_type: CallType) -> bool:
        return call_type in self.accept

    def reset(self):
        """Mark the host usable again, forgetting previous failures"""
        self.up = True
        self.retry_count = 0

    def has_expired(self, ttl: float, now: Optional[float] = None) -> bool:
        """Whether a quarantined host has been down for longer than ``ttl`` seconds.

        Pure predicate, an up host never expires. Callers must ``reset()`` the host
        themselves.
        """
        if self.up:
            return False
        if now is None:
            now = time.time()
        return now - self.last_use > ttl


def build_default_hosts(
    app_id: str,
    primary_domain: str = PRIMARY_DOMAIN,
    fallback_domain: str = FALLBACK_DOMAIN,
) -> List[StatefulHost]:
    """Build the prioritized host list for an application.

    The DSN host serves reads and the main host serves writes. The fallback hosts
    live in other regions, accept both call types and are shuffled once so that
    clients do not all fail over to the same region.
    """
    fallback_hosts = [
        StatefulHost(url=f"{app_id}-{i}.{fallback_domain}")
        for i in range(1, FALLBACK_HOSTS_COUNT + 1)
    ]
    random.shuffle(fallback_hosts)

    return [
        StatefulHost(url=f"{app_id}-dsn.{primary_domain}", accept=READ_ONLY),
        StatefulHost(url=f"{app_id}.{primary_domain}", accept=WRITE_ONLY),
        *fallback_hosts,
    ]

import logging
from typing import Any, Dict, List, Optional
from .config import ClientConfig
from .metrics import MetricsCollector
from .requester import AiohttpRequester, Requester
from .transport import Transport

logger = logging.getLogger(__name__)

class SearchClient:
    """
    Entry point for calling the search API, read and write calls fail over across hosts
    """

    def __init__(self, config: ClientConfig, requester: Optional[Requester] = None):
        self.config = config
        self.app_id = config.app_id

        # Initialize components
        self.metrics = MetricsCollector(config.app_id)
        self.requester = requester or AiohttpRequester()
        self.transport = Transport(config, self.requester, metrics=self.metrics)

    @classmethod
    def create(cls, app_id: str, api_key: str, **kwargs) -> "SearchClient":
        """Build a client for an application using the default hosts"""
        return cls(ClientConfig(app_id=app_id, api_key=api_key, **kwargs))

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        """Initialize the client"""
        start = getattr(self.requester, "start", None)
        if start is not None:
            await start()
        logger.debug("Search client started for %s with %d hosts", self.app_id, len(self.config.hosts))

    async def close(self):
        """Cleanup resources"""
        close = getattr(self.requester, "close", None)
        if close is not None:
            await close()

    async def read(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        opts: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None
    ) -> Dict[str, Any]:
        return await self.transport.read(method, path, body, opts, deadline)

    async def write(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        opts: Optional[Dict[str, Any]] = None,
        deadline: Optional[float] = None
    ) -> Dict[str, Any]:
        return await self.transport.write(method, path, body, opts, deadline)

    # Management methods
    def get_host_states(self) -> List[Dict[str, Any]]:
        """Get the health of every host as currently known by this client"""
        return self.transport.retry_strategy.host_states()

    def get_metrics(self) -> Dict[str, Any]:
        """Get client metrics"""
        return self.metrics.get_metrics()

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, model_validator
from .exceptions import InvalidConfigurationError
from .hosts import CallType, StatefulHost, build_default_hosts
from .request_options import GZIP_ENCODING
from .retry_strategy import RetryConfig

USER_AGENT = "search-api-client-python/0.1.0"

class ClientConfig(BaseModel):
    # Credentials
    app_id: str = Field(default="", description="Application ID, also used to derive default hosts")
    api_key: str = Field(default="", description="API key sent with every request")

    # Hosts in priority order, derived from app_id when left empty
    hosts: List[StatefulHost] = Field(default_factory=list)

    # Base timeouts in seconds, scaled per attempt by the host retry count
    read_timeout: float = Field(default=5.0, gt=0)
    write_timeout: float = Field(default=30.0, gt=0)
    connect_timeout: float = Field(default=2.0, gt=0)

    retry: RetryConfig = Field(default_factory=RetryConfig)

    default_headers: Dict[str, str] = Field(default_factory=dict)
    compression: Optional[str] = Field(default=None, description="Set to 'gzip' to ask for compressed responses")
    user_agent: str = Field(default=USER_AGENT)

    @model_validator(mode="after")
    def _resolve_hosts(self) -> "ClientConfig":
        if self.compression not in (None, GZIP_ENCODING):
            raise InvalidConfigurationError("compression", self.compression)
        if not self.hosts:
            if not self.app_id:
                raise InvalidConfigurationError(
                    "app_id", self.app_id, "Either app_id or an explicit host list is required"
                )
            self.hosts = build_default_hosts(self.app_id)
        return self

    def get_timeout(self, call_type: CallType) -> float:
        if call_type == CallType.READ:
            return self.read_timeout
        return self.write_timeout

    def build_headers(self) -> Dict[str, str]:
        """Headers sent with every request, user defaults win over built-in ones"""
        headers = {
            "Content-Type": "application/json; charset=utf-8",
            "User-Agent": self.user_agent,
        }
        if self.app_id:
            headers["X-Algolia-Application-Id"] = self.app_id
        if self.api_key:
            headers["X-Algolia-API-Key"] = self.api_key
        headers.update(self.default_headers)
        return headers

from typing import Optional


class SearchClientError(Exception):
    """Base exception for SearchClient errors"""
    def __init__(self, message: str, error_code: int = None):
        self.error_code = error_code
        super().__init__(message)

class HttpError(SearchClientError):
    """The API rejected the request with a 4xx status, retrying will not help"""
    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}", error_code=code)

class UnreachableHostsError(SearchClientError):
    """Every tryable host failed with a transient outcome"""
    def __init__(self, method: str, path: str, attempted_hosts: Optional[list] = None):
        self.method = method
        self.path = path
        self.attempted_hosts = list(attempted_hosts or [])
        if self.attempted_hosts:
            error_message = (
                f"Unreachable hosts for {method} {path}, tried: "
                f"{', '.join(self.attempted_hosts)}"
            )
        else:
            error_message = f"Unreachable hosts for {method} {path}: no host to try"
        super().__init__(error_message)

class DecodeError(SearchClientError):
    """Response body is not a well-formed JSON document"""
    def __init__(self, body: str, reason: str = None):
        self.body = body
        self.reason = reason
        error_message = "Unable to decode response body"
        if reason:
            error_message += f": {reason}"
        super().__init__(error_message)

class DeadlineExceededError(SearchClientError):
    """The caller-supplied deadline elapsed before the call completed"""
    def __init__(self, method: str, path: str, deadline: float):
        self.method = method
        self.path = path
        self.deadline = deadline
        super().__init__(f"Request {method} {path} exceeded its deadline of {deadline} seconds")

class InvalidConfigurationError(SearchClientError):
    """Invalid SearchClient configuration"""
    def __init__(self, config_key: str, config_value: str, message: str = None):
        self.config_key = config_key
        self.config_value = config_value
        error_message = message or f"Invalid configuration for key '{config_key}' with value '{config_value}'"
        super().__init__(error_message)

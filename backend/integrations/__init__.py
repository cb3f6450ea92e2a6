# Integrations - external provider clients
from integrations.base_client import BaseAPIClient, RateLimiter

__all__ = [
    "BaseAPIClient",
    "RateLimiter",
]

from .http_client import GatewayClient

__all__ = [
    "GatewayClient",
]

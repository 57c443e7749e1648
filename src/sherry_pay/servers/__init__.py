from .apps import GatewayServer, create_app

__all__ = [
    "GatewayServer",
    "create_app",
]

from .bases import ChainClientFactory
from .evm import (
    EVMChainClient,
    TokenInfo,
    BalanceCheck,
    Call3,
    ExecutionDetails,
)

__all__ = [
    "ChainClientFactory",
    "EVMChainClient",
    "TokenInfo",
    "BalanceCheck",
    "Call3",
    "ExecutionDetails",
]

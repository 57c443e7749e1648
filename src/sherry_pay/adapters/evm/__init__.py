from .adapter import EVMChainClient
from .schemas import (
    TokenInfo,
    BalanceCheck,
    Call3,
    ExecutionDetails,
)
from .multicall import (
    encode_function_data,
    encode_aggregate3,
    hash_metadata,
    serialize_transaction_request,
)
from .constants import MULTICALL3_ADDRESS, AVALANCHE_FUJI_CHAIN_ID, SupportedToken

__all__ = [
    "EVMChainClient",
    "TokenInfo",
    "BalanceCheck",
    "Call3",
    "ExecutionDetails",
    "encode_function_data",
    "encode_aggregate3",
    "hash_metadata",
    "serialize_transaction_request",
    "MULTICALL3_ADDRESS",
    "AVALANCHE_FUJI_CHAIN_ID",
    "SupportedToken",
]

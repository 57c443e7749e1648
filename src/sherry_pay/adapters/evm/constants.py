"""
EVM Chain Constants

Well-known contract addresses and the Avalanche Fuji defaults the gateway
ships with. Any of them can be overridden through ``GatewayConfig``.
"""

from typing import List

from pydantic import BaseModel, Field


#: Multicall3 is deployed at the same address on every supported EVM network.
MULTICALL3_ADDRESS: str = "0xcA11bde05977b3631167028862bE2a173976CA11"

AVALANCHE_FUJI_CHAIN_ID: int = 43113
DEFAULT_CHAIN_NAME: str = "Avalanche Fuji"
DEFAULT_CHAIN_SOURCE: str = "fuji"
DEFAULT_RPC_URL: str = "https://api.avax-test.network/ext/bc/C/rpc"


class SupportedToken(BaseModel):
    """Token offered by the deposit selector."""
    symbol: str = Field(..., min_length=1)
    address: str = Field(..., description="Token contract address")
    decimals: int = Field(..., ge=0, le=255, description="Token decimals")


FUJI_SUPPORTED_TOKENS: List[SupportedToken] = [
    SupportedToken(symbol="USDC", address="0x5425890298aed601595a70ab815c96711a31bc65", decimals=6),
    SupportedToken(symbol="WAVAX", address="0xd00ae08403b9bbb9124bb305c09058e32c39a48c", decimals=18),
]

"""
EVM Adapter Schema Models

Pydantic models exchanged with :class:`EVMChainClient`.

    - TokenInfo: ERC-20 ``symbol`` / ``decimals``.
    - BalanceCheck: Result of comparing a balance against a required amount.
    - Call3: One Multicall3 ``aggregate3`` sub-call.
    - ExecutionDetails: Everything needed to assemble an execution transaction.
"""

from typing import Optional

from pydantic import Field

from ...schemas.bases import CanonicalModel


class TokenInfo(CanonicalModel):
    """ERC-20 token metadata."""

    symbol: str = Field(..., description="Token symbol")
    decimals: int = Field(..., ge=0, le=255, description="Token decimals")


class BalanceCheck(CanonicalModel):
    """
    Outcome of a balance check.

    Amounts are decimal strings so values above 2**53 survive JSON clients.

    Attributes:
        has_balance: True when ``balance >= required``
        balance: Current balance in the token's smallest unit
        required: Requested amount in the token's smallest unit
    """

    has_balance: bool = Field(..., alias="hasBalance")
    balance: str
    required: str


class Call3(CanonicalModel):
    """
    Multicall3 ``aggregate3`` sub-call.

    Attributes:
        target: Contract the call is sent to
        allow_failure: Whether the batch survives this call reverting
        call_data: 0x-prefixed ABI-encoded calldata
    """

    target: str
    allow_failure: bool = Field(default=False, alias="allowFailure")
    call_data: str = Field(..., alias="callData")


class ExecutionDetails(CanonicalModel):
    """
    Input of :meth:`EVMChainClient.build_execution_transaction`.

    Attributes:
        payment_id: bytes32 payment identifier (0x + 64 hex)
        payer_address: Account that signs the transaction
        merchant: Address receiving the funds
        token: ERC-20 token contract address
        amount: Positive integer amount (decimal string)
        metadata: Canonical metadata string, hashed before going on-chain
    """

    payment_id: str = Field(..., alias="paymentId")
    payer_address: Optional[str] = Field(default=None, alias="payerAddress")
    merchant: str
    token: str
    amount: str
    metadata: str = "{}"

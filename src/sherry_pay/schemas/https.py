"""
HTTP Request/Response Schema Models for the Payment Gateway

This module defines the Pydantic models used on the HTTP surface:

1. Client creates a payment (``POST /api/payment`` or ``POST /api/gateway``)
2. Server answers with a reduced payment summary
3. Client asks for the execution transaction (``POST /api/gateway``)
4. Server answers with an unsigned serialized transaction to sign

Request models are intentionally loose about field types: address and amount
checks belong to the payment service, which raises the domain errors the HTTP
layer maps to status codes.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .payments import PaymentSummary


# ============================================================================
# Requests
# ============================================================================

class CreatePaymentRequest(BaseModel):
    """Body of a payment creation request.

    Attributes:
        merchant_address: Address receiving the funds.
        token_address: ERC-20 token contract address.
        amount: Integer amount in the token's smallest unit (string or int).
        metadata: Arbitrary application payload.
        payer_address: Optional account expected to pay.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    merchant_address: Optional[str] = Field(default=None, alias="merchantAddress")
    token_address: Optional[str] = Field(default=None, alias="tokenAddress")
    amount: Any = Field(default=None, description="Positive integer amount")
    metadata: Any = Field(default=None, description="Application payload")
    payer_address: Optional[str] = Field(default=None, alias="payerAddress")


class ExecutePaymentRequest(BaseModel):
    """Body of a payment execution request.

    Sherry renderers send the connected wallet as ``account``; API callers may
    use ``payerAddress`` instead.

    Attributes:
        payment_id: Identifier returned at creation.
        account: Connected wallet address supplied by the renderer.
        payer_address: Explicit payer address.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    payment_id: str = Field(..., alias="paymentId", min_length=1)
    account: Optional[str] = Field(default=None)
    payer_address: Optional[str] = Field(default=None, alias="payerAddress")

    def resolved_payer(self) -> Optional[str]:
        """Payer given by the request, preferring ``payerAddress``."""
        return self.payer_address or self.account


# ============================================================================
# Responses
# ============================================================================

class CreatePaymentResponse(BaseModel):
    """Response for a successfully created payment."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    payment: PaymentSummary


class ExecutionResponse(BaseModel):
    """Unsigned transaction the payer must sign and broadcast.

    Attributes:
        serialized_transaction: JSON unsigned transaction request ``{to, data, chainId, type}``.
        chain_id: Display name of the target chain.
    """
    model_config = ConfigDict(populate_by_name=True)

    serialized_transaction: str = Field(..., alias="serializedTransaction")
    chain_id: str = Field(..., alias="chainId")


class ErrorResponse(BaseModel):
    """JSON body of every error response."""
    error: str

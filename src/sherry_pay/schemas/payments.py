"""
Payment Record Schema Models

Pydantic models for the off-chain payment records kept in the key-value store
and for the reduced views returned to HTTP callers.

Records are persisted as JSON with camelCase keys (``paymentId``,
``payerAddress``, ``createdAt``, ``expiresAt``). Reading a record back through
``PaymentRecord.model_validate`` is the only way entries leave the store, so a
malformed entry is rejected instead of being half-trusted.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import Field, field_serializer, field_validator, model_validator
from web3 import Web3

from .bases import CanonicalModel, PaymentStatus, canonical_json, to_iso_millis


PAYMENT_ID_PATTERN = r"^0x[0-9a-fA-F]{64}$"


def canonicalize_metadata(metadata: Any) -> str:
    """
    Encode an application metadata payload into its stored string form.

    Strings are kept verbatim, ``None`` becomes ``"{}"`` and anything else is
    encoded with :func:`canonical_json`, so equal payloads always hash equally.
    """
    if isinstance(metadata, str):
        return metadata
    if metadata is None:
        return "{}"
    return canonical_json(metadata)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PaymentSummary(CanonicalModel):
    """
    Reduced view of a payment returned by creation.

    Merchant, token and metadata are deliberately left out.
    """

    payment_id: str = Field(..., alias="paymentId", description="Payment identifier (bytes32 hex)")
    amount: str = Field(..., description="Amount in the token's smallest unit")
    expires_at: datetime = Field(..., alias="expiresAt", description="Expiry timestamp")

    @field_serializer("expires_at")
    def _serialize_expires_at(self, value: datetime) -> str:
        return to_iso_millis(value)


class PaymentRecord(CanonicalModel):
    """
    Off-chain pending payment record.

    Attributes:
        payment_id: keccak256 identifier, also the on-chain correlation id
        merchant: Address receiving the funds
        token: ERC-20 token contract address
        amount: Positive integer amount (decimal string, smallest unit)
        metadata: Canonical string form of the application payload
        payer_address: Optional account expected to pay
        status: ``pending`` or ``completed``
        created_at: Creation timestamp (UTC)
        expires_at: Expiry timestamp (UTC), strictly after ``created_at``

    Example:
        record = PaymentRecord.model_validate(await kv.get("payment:0x..."))
        if record.is_expired(utc_now()):
            ...
    """

    payment_id: str = Field(..., alias="paymentId", pattern=PAYMENT_ID_PATTERN)
    merchant: str = Field(..., description="Merchant address")
    token: str = Field(..., description="ERC-20 token address")
    amount: str = Field(..., description="Amount in the token's smallest unit")
    metadata: str = Field(default="{}", description="Canonical metadata string")
    payer_address: Optional[str] = Field(default=None, alias="payerAddress")
    status: PaymentStatus = Field(default=PaymentStatus.PENDING)
    created_at: datetime = Field(..., alias="createdAt")
    expires_at: datetime = Field(..., alias="expiresAt")

    @field_validator("merchant", "token")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not Web3.is_address(value):
            raise ValueError(f"invalid EVM address: {value!r}")
        return value

    @field_validator("payer_address")
    @classmethod
    def _check_payer(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not Web3.is_address(value):
            raise ValueError(f"invalid EVM address: {value!r}")
        return value

    @field_validator("amount")
    @classmethod
    def _check_amount(cls, value: str) -> str:
        if not value.isdigit() or int(value) <= 0:
            raise ValueError(f"amount must be a positive integer string, got {value!r}")
        return value

    @field_validator("created_at", "expires_at")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @model_validator(mode="after")
    def _check_window(self) -> "PaymentRecord":
        if self.expires_at <= self.created_at:
            raise ValueError("expiresAt must be later than createdAt")
        return self

    @field_serializer("created_at", "expires_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return to_iso_millis(value)

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` has reached ``expires_at``."""
        return _as_utc(now) >= self.expires_at

    def remaining_ttl(self, now: datetime) -> int:
        """Whole seconds left until expiry, rounded up and never below 1."""
        remaining = (self.expires_at - _as_utc(now)).total_seconds()
        return max(1, math.ceil(remaining))

    def summary(self) -> PaymentSummary:
        """Return the reduced ``{paymentId, amount, expiresAt}`` view."""
        return PaymentSummary(
            payment_id=self.payment_id,
            amount=self.amount,
            expires_at=self.expires_at,
        )

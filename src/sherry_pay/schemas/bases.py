"""
Base Schema Models for the Sherry Payment Gateway

This module defines the base classes and shared helpers that the other schema
models build on. It provides deterministic serialization for values that are
hashed or compared, and the timestamp format used in persisted records.

Core Classes:
    - CanonicalModel: Pydantic base model dumping by alias
    - PaymentStatus: Lifecycle states of an off-chain payment record

Helpers:
    - canonical_json: Deterministic JSON encoding (sorted keys, no whitespace)
    - to_iso_millis: ISO-8601 UTC timestamp with millisecond precision and ``Z``

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


def canonical_json(data: Any) -> str:
    """
    RFC8785-ish: sort_keys + no whitespace
    """
    return json.dumps(data, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def to_iso_millis(value: datetime) -> str:
    """
    Format a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    Naive datetimes are taken to already be in UTC.

    Example:
        to_iso_millis(datetime(2024, 1, 1, tzinfo=timezone.utc))
        # Returns: '2024-01-01T00:00:00.000Z'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class CanonicalModel(BaseModel):
    """
    Pydantic base model that speaks camelCase on the wire.

    Field names are snake_case in Python and camelCase on the wire; models
    accept either form on input (``populate_by_name``) and dump with aliases.

    Example:
        class MyModel(CanonicalModel):
            payment_id: str = Field(..., alias="paymentId")

        model = MyModel(payment_id="0x01")
        model.to_dict()  # {'paymentId': '0x01'}
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert model to a JSON-compatible dictionary keyed by field aliases.
        """
        return self.model_dump(mode="json", by_alias=True)


class PaymentStatus(str, Enum):
    """
    Lifecycle states of an off-chain payment record.

    Attributes:
        PENDING: Created and waiting to be executed by the payer
        COMPLETED: An execution transaction has been issued for the payment
    """
    PENDING = "pending"
    COMPLETED = "completed"

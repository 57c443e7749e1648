from .bases import CanonicalModel, PaymentStatus, canonical_json, to_iso_millis, utc_now
from .payments import PaymentRecord, PaymentSummary, canonicalize_metadata
from .https import CreatePaymentRequest, ExecutePaymentRequest, CreatePaymentResponse, ExecutionResponse, ErrorResponse
from .metadata import (
    Metadata,
    DynamicAction,
    ChainContext,
    TextParameter,
    SelectParameter,
    SelectOption,
    create_metadata,
)

__all__ = [
    "CanonicalModel",
    "PaymentStatus",
    "canonical_json",
    "to_iso_millis",
    "utc_now",
    "PaymentRecord",
    "PaymentSummary",
    "canonicalize_metadata",
    "CreatePaymentRequest",
    "ExecutePaymentRequest",
    "CreatePaymentResponse",
    "ExecutionResponse",
    "ErrorResponse",
    "Metadata",
    "DynamicAction",
    "ChainContext",
    "TextParameter",
    "SelectParameter",
    "SelectOption",
    "create_metadata",
]

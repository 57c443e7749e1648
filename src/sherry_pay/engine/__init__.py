from .exceptions import (
    GatewayError,
    RequestValidationError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidTokenError,
    TokenLookupError,
    PaymentError,
    PaymentNotFoundError,
    PaymentExpiredError,
    PaymentStatusError,
    InvalidPaymentRecordError,
    MetadataValidationError,
    ChainCallError,
    ConfigurationError,
    GatewayResponseError,
)
from .events import (
    BaseEvent,
    EventBus,
    PaymentCreatedEvent,
    PaymentExecutedEvent,
    PaymentRejectedEvent,
)

__all__ = [
    "GatewayError",
    "RequestValidationError",
    "InvalidAddressError",
    "InvalidAmountError",
    "InvalidTokenError",
    "TokenLookupError",
    "PaymentError",
    "PaymentNotFoundError",
    "PaymentExpiredError",
    "PaymentStatusError",
    "InvalidPaymentRecordError",
    "MetadataValidationError",
    "ChainCallError",
    "ConfigurationError",
    "GatewayResponseError",
    "BaseEvent",
    "EventBus",
    "PaymentCreatedEvent",
    "PaymentExecutedEvent",
    "PaymentRejectedEvent",
]

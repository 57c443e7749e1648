"""
Exception and Error Definitions Module

Defines the custom exception hierarchy for payment creation, payment execution,
intent metadata rendering and blockchain interactions. All exceptions inherit
from GatewayError so the HTTP layer can convert them in one place.

Every exception carries a ``status_code`` class attribute that the server uses
when turning it into a JSON error response.

Exception Hierarchy:
    GatewayError (500)
    ├── RequestValidationError (400)
    │   ├── InvalidAddressError
    │   ├── InvalidAmountError
    │   └── InvalidTokenError
    ├── PaymentError (400)
    │   ├── PaymentNotFoundError
    │   ├── PaymentExpiredError
    │   └── PaymentStatusError
    ├── InvalidPaymentRecordError (500)
    ├── MetadataValidationError (500)
    ├── ChainCallError (500)
    ├── ConfigurationError (500)
    └── GatewayResponseError
"""

from typing import Optional


class GatewayError(Exception):
    """
    Root exception class for all project-specific exceptions.

    Subclasses override ``status_code`` to select the HTTP status the server
    answers with when the exception reaches the request boundary.
    """
    status_code: int = 500


class RequestValidationError(GatewayError):
    """
    Raised when caller-supplied input is rejected before any side effect.
    """
    status_code = 400


class InvalidAddressError(RequestValidationError):
    """
    Raised when a merchant, token or payer address is not a valid EVM address.
    """
    pass


class InvalidAmountError(RequestValidationError):
    """
    Raised when a payment amount is missing, not an integer, zero or negative.
    """
    pass


class InvalidTokenError(RequestValidationError):
    """
    Raised when a token address does not point at a conforming ERC-20 contract.

    This includes scenarios such as:
    - ``symbol()`` or ``decimals()`` reverting
    - The address holding no contract code
    """
    pass


class TokenLookupError(InvalidTokenError):
    """
    Raised when the token could not be checked because the RPC node failed.

    Still an :class:`InvalidTokenError` for callers, but answered as a server
    error since the token itself may be fine.
    """
    status_code = 500


class PaymentError(GatewayError):
    """
    Base exception for payment lookups and execution preconditions.
    """
    status_code = 400


class PaymentNotFoundError(PaymentError):
    """
    Raised when no live record exists for a payment id.

    Never-created and already-expired payments are indistinguishable.
    """
    pass


class PaymentExpiredError(PaymentError):
    """
    Raised when a payment record is past its ``expiresAt`` timestamp.

    The store may still hold the record; eviction happens on the store's
    own TTL clock.
    """
    pass


class PaymentStatusError(PaymentError):
    """
    Raised when a payment is not in the ``pending`` state, or another
    execution of the same payment is already in flight.
    """
    pass


class InvalidPaymentRecordError(GatewayError):
    """
    Raised when an entry read from the store does not match the payment
    record schema.
    """
    pass


class MetadataValidationError(GatewayError):
    """
    Raised when an intent metadata descriptor fails schema validation.
    """
    pass


class ChainCallError(GatewayError):
    """
    Raised when blockchain interaction (RPC call or ABI encoding) fails.

    This includes scenarios such as:
    - RPC call timeout or connectivity issues
    - Contract call revert on balance or allowance reads
    - Arguments that cannot be ABI-encoded
    """
    pass


class ConfigurationError(GatewayError):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Missing gateway contract address
    - Unsupported settlement mode
    - Malformed numeric environment values
    """
    pass


class GatewayResponseError(GatewayError):
    """
    Raised by the HTTP client when the gateway answers with a non-2xx status.

    Attributes:
        status_code: HTTP status returned by the gateway
        message: Error string taken from the ``error`` field of the body
    """

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message or f"Gateway request failed with status {status_code}"
        super().__init__(self.message)

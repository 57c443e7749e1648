from .payments import PaymentService, parse_amount, generate_payment_id
from .intents import IntentResponder

__all__ = [
    "PaymentService",
    "parse_amount",
    "generate_payment_id",
    "IntentResponder",
]

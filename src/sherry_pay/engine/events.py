"""
Typed payment lifecycle events and the bus that delivers them.

Events carry their own data; hooks are async side-effect functions (audit
logs, notifications, analytics) that never alter the outcome of the operation
that published the event.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..schemas.bases import utc_now

logger = logging.getLogger(__name__)

# ==================== Base Event ====================

class BaseEvent(ABC):
    """Base class for all events in the system."""

    @abstractmethod
    def __repr__(self) -> str:
        """String representation of the event."""
        pass


# ==================== Payment Events ====================

class PaymentCreatedEvent(BaseModel, BaseEvent):
    """A pending payment record was stored."""
    payment_id: str
    merchant: str
    token: str
    amount: str
    expires_at: datetime
    occurred_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return f"PaymentCreatedEvent(payment_id={self.payment_id}, amount={self.amount})"


class PaymentExecutedEvent(BaseModel, BaseEvent):
    """An unsigned execution transaction was issued for a payment."""
    payment_id: str
    payer_address: str
    serialized_transaction: str
    occurred_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return f"PaymentExecutedEvent(payment_id={self.payment_id}, payer={self.payer_address})"


class PaymentRejectedEvent(BaseModel, BaseEvent):
    """An execution attempt was refused (unknown, expired or not pending)."""
    payment_id: str
    reason: str
    error_type: str
    occurred_at: datetime = Field(default_factory=utc_now)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def __repr__(self) -> str:
        return f"PaymentRejectedEvent(payment_id={self.payment_id}, error={self.error_type})"


# ==================== Event Bus ====================

EventHookFunc = Callable[[BaseEvent], Awaitable[None]]


class EventBus:
    """Event dispatcher that runs registered hooks for published events."""

    def __init__(self) -> None:
        """Initialize with no hooks."""
        self._hooks: Dict[type, list[EventHookFunc]] = {}

    def hook(self, event_class: type[BaseEvent], hook_func: EventHookFunc) -> None:
        """
        Register a hook for the given event class.

        Args:
            event_class: The event class to hook into.
            hook_func: Async function called with the event when it is published.

        Raises:
            TypeError: If hook_func is not a coroutine function.
        """
        if not inspect.iscoroutinefunction(hook_func):
            raise TypeError(f"Hook must be a coroutine function, got {type(hook_func).__name__}")

        if event_class not in self._hooks:
            self._hooks[event_class] = []
        self._hooks[event_class].append(hook_func)

    async def dispatch(self, event: BaseEvent) -> None:
        """
        Run every hook registered for ``type(event)`` concurrently and wait for them.

        A failing hook is logged and does not reach the publisher; the other
        hooks still run.
        """
        hooks = self._hooks.get(type(event), [])
        if not hooks:
            return
        results = await asyncio.gather(*(hook(event) for hook in hooks), return_exceptions=True)
        for hook, result in zip(hooks, results):
            if isinstance(result, Exception):
                logger.error(
                    "Hook %s failed for %r",
                    getattr(hook, "__qualname__", hook), event,
                    exc_info=result,
                )


async def publish(event_bus: Optional[EventBus], event: BaseEvent) -> None:
    """Dispatch ``event`` when a bus is configured."""
    if event_bus is not None:
        await event_bus.dispatch(event)

"""
Metadata/Intent Responder

Renders the mini-app descriptor served on ``GET /api/gateway``. Two variants:

- pending: one dynamic action whose ``select`` lists the live pending payments
  (``"<merchant> <amount>"`` -> ``paymentId``); submitting it executes the payment.
- deposit: one dynamic action with a token selector and an amount field;
  submitting it creates a payment to the configured deposit merchant.

Every descriptor goes through :func:`create_metadata` before it is returned.
"""

import logging
from datetime import datetime
from typing import Callable, List

from ..config import GatewayConfig
from ..schemas.bases import PaymentStatus, utc_now
from ..schemas.metadata import (
    ChainContext,
    DynamicAction,
    Metadata,
    SelectOption,
    SelectParameter,
    TextParameter,
    create_metadata,
)
from ..stores.payments import PAYMENT_KEY_PREFIX, PaymentRecordStore

logger = logging.getLogger(__name__)

GATEWAY_PATH = "/api/gateway"


class IntentResponder:
    """
    Builds validated intent descriptors.

    Attributes:
        store: Payment record store read by the pending variant
        config: Descriptor header fields, chain alias, variant and token list
        clock: Source of the current UTC time
    """

    def __init__(
        self,
        store: PaymentRecordStore,
        config: GatewayConfig,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.config = config
        self.clock = clock

    def _descriptor(self, base_url: str, action: DynamicAction) -> Metadata:
        return create_metadata(Metadata(
            url=self.config.app_url,
            icon=self.config.app_icon,
            title=self.config.app_title,
            description=self.config.app_description,
            base_url=base_url,
            actions=[action],
        ))

    async def pending_payment_options(self) -> List[SelectOption]:
        """Selectable options for every live, pending, unexpired payment."""
        now = self.clock()
        entries = await self.store.list_by_prefix(PAYMENT_KEY_PREFIX)
        return [
            SelectOption(label=f"{record.merchant} {record.amount}", value=record.payment_id)
            for _, record in entries
            if record.status == PaymentStatus.PENDING and not record.is_expired(now)
        ]

    async def build_pending_payments_metadata(self, base_url: str) -> Metadata:
        """
        Descriptor listing pending payments for execution.

        Raises:
            MetadataValidationError: If the rendered descriptor is invalid.
        """
        options = await self.pending_payment_options()
        logger.debug("Rendering %d pending payments", len(options))

        return self._descriptor(base_url, DynamicAction(
            label="Pagos Pendientes",
            description="Muestra los pagos pendientes.",
            chains=ChainContext(source=self.config.chain_source),
            path=GATEWAY_PATH,
            params=[
                SelectParameter(
                    name="paymentId",
                    label="Seleccione el pago",
                    type="select",
                    required=True,
                    options=options,
                ),
            ],
        ))

    async def build_deposit_metadata(self, base_url: str) -> Metadata:
        """
        Descriptor for depositing a configured token to the deposit merchant.

        Raises:
            MetadataValidationError: If the rendered descriptor is invalid.
        """
        token_options = [
            SelectOption(label=token.symbol, value=token.address)
            for token in self.config.supported_tokens
        ]

        return self._descriptor(base_url, DynamicAction(
            label="Depositar",
            description="Crea un pago en el token seleccionado.",
            chains=ChainContext(source=self.config.chain_source),
            path=GATEWAY_PATH,
            params=[
                SelectParameter(
                    name="tokenAddress",
                    label="Token",
                    type="select",
                    required=True,
                    options=token_options,
                ),
                TextParameter(
                    name="amount",
                    label="Monto (unidad mínima del token)",
                    type="text",
                    required=True,
                ),
            ],
        ))

    async def build_metadata(self, base_url: str) -> Metadata:
        """Descriptor of the configured ``metadata_variant``."""
        if self.config.metadata_variant == "deposit":
            return await self.build_deposit_metadata(base_url)
        return await self.build_pending_payments_metadata(base_url)

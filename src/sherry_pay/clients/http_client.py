"""
Sherry Payment Gateway HTTP Client

Typed httpx client for the gateway routes. Useful for merchant backends that
create payments programmatically, and for end-to-end tests through
``httpx.ASGITransport``.
"""

from typing import Any, Dict, Optional

import httpx

from ..adapters.evm.schemas import BalanceCheck
from ..engine.exceptions import GatewayResponseError
from ..schemas.https import CreatePaymentResponse, ExecutionResponse
from ..schemas.metadata import Metadata
from ..schemas.payments import PaymentSummary


class GatewayClient(httpx.AsyncClient):
    """
    Extended httpx.AsyncClient with typed gateway calls.

    Fully compatible with httpx.AsyncClient - supports all methods, properties,
    and can be used as an async context manager.

    Usage:
        ```python
        async with GatewayClient(base_url="https://pay.example.com") as client:
            summary = await client.create_payment(merchant, token, "1000000")
            execution = await client.execute_payment(summary.payment_id, account=payer)
        ```
    """

    async def get_metadata(self) -> Metadata:
        """
        Fetch the mini-app descriptor.

        Raises:
            GatewayResponseError: If the gateway answers with a non-2xx status.
        """
        response = await self.get("/api/gateway")
        return Metadata.model_validate(self._payload(response))

    async def create_payment(
        self,
        merchant_address: str,
        token_address: str,
        amount: Any,
        metadata: Any = None,
        payer_address: Optional[str] = None,
    ) -> PaymentSummary:
        """
        Create a payment through ``POST /api/payment``.

        Returns:
            PaymentSummary: ``{paymentId, amount, expiresAt}`` of the new payment.

        Raises:
            GatewayResponseError: If the gateway rejects the request.
        """
        body: Dict[str, Any] = {
            "merchantAddress": merchant_address,
            "tokenAddress": token_address,
            "amount": str(amount),
        }
        if metadata is not None:
            body["metadata"] = metadata
        if payer_address is not None:
            body["payerAddress"] = payer_address

        response = await self.post("/api/payment", json=body)
        return CreatePaymentResponse.model_validate(self._payload(response)).payment

    async def execute_payment(self, payment_id: str, account: Optional[str] = None) -> ExecutionResponse:
        """
        Request the unsigned execution transaction of a payment.

        Args:
            payment_id: Identifier returned at creation.
            account: Wallet that will sign; defaults to the payer stored on the payment.

        Raises:
            GatewayResponseError: If the gateway rejects the request.
        """
        body: Dict[str, Any] = {"paymentId": payment_id}
        if account is not None:
            body["account"] = account

        response = await self.post("/api/gateway", json=body)
        return ExecutionResponse.model_validate(self._payload(response))

    async def check_balance(self, payment_id: str, account: str) -> BalanceCheck:
        """
        Check whether ``account`` holds enough of the payment's token.

        Raises:
            GatewayResponseError: If the payment is unknown or the address is invalid.
        """
        response = await self.get(f"/api/payment/{payment_id}/balance", params={"account": account})
        return BalanceCheck.model_validate(self._payload(response))

    @staticmethod
    def _payload(response: httpx.Response) -> Dict[str, Any]:
        if response.is_success:
            return response.json()

        message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("error")
        except ValueError:
            message = response.text or None
        raise GatewayResponseError(response.status_code, message)

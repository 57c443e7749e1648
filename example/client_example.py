import asyncio

import httpx

from sherry_pay.clients import GatewayClient

MERCHANT = "0x0000000000000000000000000000000000000001"  # Replace with the merchant wallet
PAYER = "0x0000000000000000000000000000000000000002"  # Replace with the payer wallet
USDC_FUJI = "0x5425890298aed601595a70ab815c96711a31bc65"


async def main():
    async with GatewayClient(
        base_url="http://localhost:3000",
        timeout=httpx.Timeout(60.0, read=120.0)
    ) as client:
        payment = await client.create_payment(MERCHANT, USDC_FUJI, 1_000_000, metadata={"order": "A-1"})
        print("Created:", payment.to_dict())

        metadata = await client.get_metadata()
        print("Pending options:", [o.label for o in metadata.actions[0].params[0].options])

        balance = await client.check_balance(payment.payment_id, PAYER)
        if not balance.has_balance:
            print("Payer holds", balance.balance, "of", balance.required, "required")

        execution = await client.execute_payment(payment.payment_id, account=PAYER)
        return execution


if __name__ == "__main__":
    execution = asyncio.run(main())
    print("Sign and send on", execution.chain_id, ":", execution.serialized_transaction)

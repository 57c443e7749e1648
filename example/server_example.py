import logging

from sherry_pay.config import GatewayConfig
from sherry_pay.servers import GatewayServer
from sherry_pay.engine.events import PaymentCreatedEvent, PaymentExecutedEvent, PaymentRejectedEvent

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("sherry_pay.example")

# Reads RPC_URL, GATEWAY_CONTRACT, KV_URL, ... from the environment / .env
config = GatewayConfig.from_env()

app = GatewayServer(config=config, title="Sherry Payment Gateway")


# Optional: event hooks for side effects
@app.hook(PaymentCreatedEvent)
async def on_created(event):
    logger.info("Payment created: %s (%s)", event.payment_id, event.amount)


@app.hook(PaymentExecutedEvent)
async def on_executed(event):
    logger.info("Transaction issued for %s to %s", event.payment_id, event.payer_address)


@app.hook(PaymentRejectedEvent)
async def on_rejected(event):
    logger.warning("Execution rejected for %s: %s", event.payment_id, event.reason)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="localhost", port=3000, log_level="info")

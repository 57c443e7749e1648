"""
Sherry Payment Gateway Server - FastAPI application.

Serves the intent descriptor, payment creation and payment execution routes
on top of :class:`PaymentService` and :class:`IntentResponder`.

Routes:
    GET  /api/gateway   validated mini-app descriptor
    POST /api/gateway   execute (``paymentId``) or create (``merchantAddress``)
    POST /api/payment   create a payment
    GET  /api/payment/{id}/balance  payer balance pre-check (``account`` query)
    OPTIONS /{path}     CORS preflight (204)
    GET  /health        liveness probe
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from ..adapters.bases import ChainClientFactory
from ..adapters.evm.adapter import EVMChainClient
from ..config import GatewayConfig, build_store
from ..engine.events import BaseEvent, EventBus
from ..engine.exceptions import GatewayError, RequestValidationError
from ..schemas.bases import utc_now
from ..schemas.https import (
    CreatePaymentRequest,
    CreatePaymentResponse,
    ErrorResponse,
    ExecutePaymentRequest,
    ExecutionResponse,
)
from ..services.intents import IntentResponder
from ..services.payments import PaymentService
from ..stores.bases import KeyValueStore
from ..stores.payments import PaymentRecordStore

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

PREFLIGHT_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Headers": (
        "Content-Type, Authorization, X-CSRF-Token, X-Requested-With, Accept, "
        "Accept-Version, Content-Length, Content-MD5, Date, X-Api-Version"
    ),
}


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


class GatewayServer(FastAPI):
    """FastAPI server exposing the Sherry payment gateway."""

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        kv_store: Optional[KeyValueStore] = None,
        chain_client: Optional[ChainClientFactory] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
        **fastapi_kwargs
    ):
        """Initialize the gateway server.

        Args:
            config: Gateway configuration (default: ``GatewayConfig.from_env()``)
            kv_store: Key-value store (default: built from ``config.kv_url``)
            chain_client: Chain client (default: ``EVMChainClient(config)``)
            event_bus: Lifecycle event bus (default: new instance)
            clock: Source of the current UTC time
            **fastapi_kwargs: FastAPI arguments (title, version, etc.)
        """
        # Wire services before FastAPI init
        self.config = config or GatewayConfig.from_env()
        self.kv_store = kv_store or build_store(self.config)
        self.records = PaymentRecordStore(self.kv_store)
        self.chain_client = chain_client or EVMChainClient(self.config)
        self.event_bus = event_bus or EventBus()
        self.payment_service = PaymentService(
            chain_client=self.chain_client,
            store=self.records,
            config=self.config,
            event_bus=self.event_bus,
            clock=clock,
        )
        self.intent_responder = IntentResponder(self.records, self.config, clock=clock)

        fastapi_kwargs.setdefault("title", "Sherry Payment Gateway")
        super().__init__(lifespan=self._lifespan, **fastapi_kwargs)

        self._setup_cors()
        self._setup_exception_handlers()
        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        yield
        await self.kv_store.close()

    def add_hook(self, event_class: type[BaseEvent], hook: Callable) -> None:
        """Register an event hook.

        Args:
            event_class: Event type to hook into
            hook: Async function(event) -> None

        Example:
            ```python
            async def audit(event):
                logger.info("created %s", event.payment_id)

            app.add_hook(PaymentCreatedEvent, audit)
            ```
        """
        self.event_bus.hook(event_class, hook)

    def hook(self, event_class: type[BaseEvent]) -> Callable:
        """Decorator for registering event hooks.

        Example:
            @app.hook(PaymentExecutedEvent)
            async def on_executed(event):
                await notify_merchant(event.payment_id)
        """
        def decorator(hook_func: Callable) -> Callable:
            self.event_bus.hook(event_class, hook_func)
            return hook_func
        return decorator

    def _setup_cors(self) -> None:
        @self.middleware("http")
        async def add_cors_headers(request: Request, call_next):
            response = await call_next(request)
            for name, value in CORS_HEADERS.items():
                response.headers.setdefault(name, value)
            return response

    def _setup_exception_handlers(self) -> None:
        @self.exception_handler(GatewayError)
        async def gateway_error_handler(request: Request, exc: GatewayError):
            if exc.status_code >= 500:
                logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            return error_response(str(exc), exc.status_code)

    def _setup_routes(self) -> None:
        @self.get("/api/gateway")
        async def get_metadata(request: Request):
            try:
                metadata = await self.intent_responder.build_metadata(_base_url(request))
            except GatewayError:
                raise
            except Exception:
                logger.error("Failed to build metadata", exc_info=True)
                return error_response("Error al crear metadata", 500)
            return JSONResponse(content=metadata.model_dump(mode="json", by_alias=True, exclude_none=True))

        @self.post("/api/gateway")
        async def post_gateway(request: Request):
            params = dict(request.query_params)
            params.update(await _json_body(request))

            if params.get("paymentId"):
                return await self._execute(params, "Error al ejecutar el pago")

            if self.config.metadata_variant == "deposit" and self.config.deposit_merchant_address:
                params.setdefault("merchantAddress", self.config.deposit_merchant_address)
            if params.get("merchantAddress"):
                return await self._create(params, "Error al crear el pago")

            return error_response("paymentId is required", 400)

        @self.post("/api/payment")
        async def post_payment(request: Request):
            return await self._create(await _json_body(request), "Error al crear el pago")

        @self.get("/api/payment/{payment_id}/balance")
        async def get_payer_balance(payment_id: str, account: Optional[str] = None):
            if not account:
                return error_response("account is required", 400)
            try:
                balance = await self.payment_service.check_payer_balance(payment_id, account)
            except GatewayError:
                raise
            except Exception:
                logger.error("Failed to check payer balance", exc_info=True)
                return error_response("Error al consultar el saldo", 500)
            return JSONResponse(content=balance.model_dump(mode="json", by_alias=True))

        @self.options("/{path:path}")
        async def preflight(path: str):
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)

        @self.get("/health")
        async def health():
            return {
                "status": "ok",
                "chain": self.config.chain_name,
                "store": type(self.kv_store).__name__,
            }

    async def _create(self, params: Dict[str, Any], failure_message: str) -> JSONResponse:
        try:
            payload = CreatePaymentRequest.model_validate(params)
            summary = await self.payment_service.create_payment(
                merchant_address=payload.merchant_address,
                token_address=payload.token_address,
                amount=payload.amount,
                metadata=payload.metadata,
                payer_address=payload.payer_address,
            )
        except ValidationError as e:
            raise RequestValidationError(f"Invalid request body: {e.errors()[0]['msg']}") from e
        except GatewayError:
            raise
        except Exception:
            logger.error("Failed to create payment", exc_info=True)
            return error_response(failure_message, 500)

        response = CreatePaymentResponse(payment=summary)
        return JSONResponse(content=response.model_dump(mode="json", by_alias=True))

    async def _execute(self, params: Dict[str, Any], failure_message: str) -> JSONResponse:
        try:
            payload = ExecutePaymentRequest.model_validate(params)
            serialized = await self.payment_service.execute_payment(
                payload.payment_id,
                payer_address=payload.resolved_payer(),
            )
        except ValidationError as e:
            raise RequestValidationError(f"Invalid request body: {e.errors()[0]['msg']}") from e
        except GatewayError:
            raise
        except Exception:
            logger.error("Failed to execute payment", exc_info=True)
            return error_response(failure_message, 500)

        response = ExecutionResponse(serialized_transaction=serialized, chain_id=self.config.chain_name)
        return JSONResponse(content=response.model_dump(by_alias=True))


async def _json_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise RequestValidationError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise RequestValidationError("JSON body must be an object")
    return body


def _base_url(request: Request) -> str:
    host = request.headers.get("host") or "localhost:3000"
    protocol = request.headers.get("x-forwarded-proto") or request.url.scheme or "http"
    return f"{protocol}://{host}"


def create_app(config: Optional[GatewayConfig] = None, **kwargs) -> GatewayServer:
    """Build a :class:`GatewayServer`, reading configuration from the environment when omitted."""
    return GatewayServer(config=config, **kwargs)

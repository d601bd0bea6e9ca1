"""
FastAPI surface — one checkout orchestrator per seller.

    app = create_app(CheckoutServices(backend, overlay, rates, TextInvoiceRenderer()))

    # or, from the environment (SQLite/SQL database, text invoices):
    app = create_app()
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import fastapi
from kungfu import Result, Ok, Error

from sellerdesk._config import CheckoutPolicy, Settings
from sellerdesk._errors import CheckoutError, ErrorKind, Errors
from sellerdesk._logging import setup_logging
from sellerdesk._types import SellerId
from sellerdesk.backend._sqlalchemy import SQLAlchemyBackend, create_database
from sellerdesk.checkout._cart import add_product_to_cart
from sellerdesk.checkout._events import SelectCarrier, SelectService
from sellerdesk.checkout._orchestrator import CheckoutOrchestrator, CheckoutServices
from sellerdesk.http._models import AddedOut, CheckoutOut, DraftIn, EventIn, LineIn, OrderOut, SubmitOut
from sellerdesk.invoice._render import TextInvoiceRenderer
from sellerdesk.overlay._overlay import OverlayStore
from sellerdesk.overlay._sqlalchemy import SQLAlchemyStore
from sellerdesk.shipping._rates import FlatRateLookup


logger = logging.getLogger(__name__)


_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.LOOKUP_MISS: 404,
    ErrorKind.WRITE_FAILURE: 502,
    ErrorKind.RENDER_FAILURE: 502,
    ErrorKind.COLLABORATOR_UNAVAILABLE: 503,
}


def _http_error(err: CheckoutError) -> fastapi.HTTPException:
    return fastapi.HTTPException(
        status_code=_STATUS[err.kind],
        detail={"kind": err.kind.name.lower(), "message": err.message, "field": err.field},
    )


class Sessions:
    """Live orchestrators, created and loaded on first touch."""

    def __init__(self, services: CheckoutServices) -> None:
        self.services = services
        self._live: dict[SellerId, CheckoutOrchestrator] = {}

    async def get(self, seller_id: SellerId) -> CheckoutOrchestrator:
        orchestrator = self._live.get(seller_id)
        if orchestrator is None:
            orchestrator = CheckoutOrchestrator(seller_id, self.services)
            await orchestrator.load()
            self._live[seller_id] = orchestrator
        return orchestrator

    def peek(self, seller_id: SellerId) -> CheckoutOrchestrator | None:
        return self._live.get(seller_id)


async def _apply(orchestrator: CheckoutOrchestrator, body: EventIn) -> Result[object, CheckoutError]:
    """Run one edit, resolving carrier/service/district ids against the session."""
    if (event := body.to_domain()) is not None:
        return await orchestrator.dispatch(event)

    value = body.value or ""
    match body.field:
        case "city_district":
            return Ok(await orchestrator.resolve_location(value))
        case "district":
            return await orchestrator.select_district(value)
        case "carrier":
            if not value:
                return await orchestrator.dispatch(SelectCarrier(None))
            carrier = next((c for c in orchestrator.carriers if c.id == value), None)
            if carrier is None:
                return Error(Errors.invalid("carrier", f"Courier {value} is not enabled"))
            return await orchestrator.dispatch(SelectCarrier(carrier))
        case "service":
            if not value:
                return await orchestrator.dispatch(SelectService(None))
            service = next((s for s in orchestrator.carrier_services if s.id == value), None)
            if service is None:
                return Error(Errors.invalid("service", f"Service {value} is not available"))
            return await orchestrator.dispatch(SelectService(service))
        case _:
            return Error(Errors.invalid(body.field, f"Missing value for {body.field}"))


def create_app(services: CheckoutServices | None = None, settings: Settings | None = None) -> fastapi.FastAPI:
    """
    Build the app.

    Without services, the lifespan opens the database named by Settings
    and wires SQL-backed stores with a text invoice renderer.
    """

    @asynccontextmanager
    async def lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
        if services is not None:
            yield
            return

        env = settings or Settings.from_env()
        setup_logging(env.log_level, env.log_format)
        session_factory, engine = await create_database(env.database_url)
        policy = CheckoutPolicy()
        app.state.sessions = Sessions(CheckoutServices(
            backend=SQLAlchemyBackend(session_factory, order_prefix=policy.order_number_prefix),
            overlay=OverlayStore(SQLAlchemyStore(session_factory)),
            rates=FlatRateLookup(),
            renderer=TextInvoiceRenderer(),
            policy=policy,
        ))
        logger.info("sellerdesk started on %s", env.database_url)
        try:
            yield
        finally:
            await engine.dispose()

    app = fastapi.FastAPI(title="sellerdesk", lifespan=lifespan)
    if services is not None:
        app.state.sessions = Sessions(services)

    def sessions(request: fastapi.Request) -> Sessions:
        return request.app.state.sessions

    # ── checkout ──────────────────────────────────────────────────────────────

    @app.post("/sellers/{seller_id}/checkout/load")
    async def load(seller_id: str, request: fastapi.Request) -> CheckoutOut:
        orchestrator = await sessions(request).get(seller_id)
        await orchestrator.load()
        return CheckoutOut.from_domain(orchestrator)

    @app.post("/sellers/{seller_id}/checkout/events")
    async def edit(seller_id: str, body: EventIn, request: fastapi.Request) -> CheckoutOut:
        orchestrator = await sessions(request).get(seller_id)
        match await _apply(orchestrator, body):
            case Error(err) if err.blocking:
                raise _http_error(err)
            case Error(err):
                orchestrator.warnings.append(err)
            case Ok(_):
                pass
        return CheckoutOut.from_domain(orchestrator)

    @app.post("/sellers/{seller_id}/checkout/phone/settle")
    async def settle_phone(seller_id: str, request: fastapi.Request) -> CheckoutOut:
        orchestrator = await sessions(request).get(seller_id)
        await orchestrator.settle_phone()
        return CheckoutOut.from_domain(orchestrator)

    @app.post("/sellers/{seller_id}/checkout/draft")
    async def save_draft(seller_id: str, body: DraftIn, request: fastapi.Request) -> CheckoutOut:
        orchestrator = await sessions(request).get(seller_id)
        match await orchestrator.save_draft(exit_edit=body.exit_edit):
            case Error(err):
                raise _http_error(err)
            case Ok(_):
                return CheckoutOut.from_domain(orchestrator)

    @app.post("/sellers/{seller_id}/checkout/drafts/{order_id}/resume")
    async def resume_draft(seller_id: str, order_id: str, request: fastapi.Request) -> CheckoutOut:
        orchestrator = await sessions(request).get(seller_id)
        match await orchestrator.resume_draft(order_id):
            case Error(err):
                raise _http_error(err)
            case Ok(_):
                return CheckoutOut.from_domain(orchestrator)

    @app.post("/sellers/{seller_id}/checkout/submit")
    async def submit(seller_id: str, request: fastapi.Request) -> SubmitOut:
        orchestrator = await sessions(request).get(seller_id)
        match await orchestrator.checkout():
            case Error(err):
                raise _http_error(err)
            case Ok(outcome):
                return SubmitOut.from_domain(outcome, orchestrator)

    @app.post("/sellers/{seller_id}/checkout/cancel")
    async def cancel(seller_id: str, request: fastapi.Request) -> CheckoutOut:
        orchestrator = await sessions(request).get(seller_id)
        await orchestrator.cancel()
        return CheckoutOut.from_domain(orchestrator)

    # ── catalog / order list ──────────────────────────────────────────────────

    @app.post("/sellers/{seller_id}/cart/lines")
    async def add_to_cart(seller_id: str, body: LineIn, request: fastapi.Request) -> AddedOut:
        live = sessions(request)
        match await add_product_to_cart(
            seller_id,
            body.to_domain(),
            backend=live.services.backend,
            overlay=live.services.overlay,
        ):
            case Error(err):
                raise _http_error(err)
            case Ok(added_to):
                pass
        if (orchestrator := live.peek(seller_id)) is not None:
            await orchestrator.load()
        return AddedOut(added_to=added_to)

    @app.post("/sellers/{seller_id}/orders/{order_id}/edit")
    async def edit_order(seller_id: str, order_id: str, request: fastapi.Request) -> CheckoutOut:
        orchestrator = await sessions(request).get(seller_id)
        match await orchestrator.request_edit(order_id):
            case Error(err):
                raise _http_error(err)
            case Ok(_):
                pass
        await orchestrator.load()
        return CheckoutOut.from_domain(orchestrator)

    @app.get("/sellers/{seller_id}/orders/{order_id}")
    async def get_order(seller_id: str, order_id: str, request: fastapi.Request) -> OrderOut:
        match await sessions(request).services.backend.get_order(order_id):
            case Error(err):
                raise _http_error(err)
            case Ok(order) if order is not None and order.seller_id == seller_id:
                return OrderOut.from_domain(order)
            case Ok(_):
                raise _http_error(Errors.not_found(f"Order {order_id} not found"))

    return app


__all__ = (
    "Sessions",
    "create_app",
)

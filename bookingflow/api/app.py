"""
HTTP adapter for quoting and for the modification workflow.

The handlers only translate JSON to domain calls and domain errors to
status codes; every rule lives in ``bookingflow.pricing`` and
``bookingflow.modifications``.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookingflow.bookings import BookingService
from bookingflow.config import settings
from bookingflow.errors import (
    ConcurrencyConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from bookingflow.logging_context import reset_request_id, set_request_id
from bookingflow.modifications.coordinator import ModificationApprovalCoordinator
from bookingflow.modifications.notifications import Notifier
from bookingflow.modifications.store import BookingStore
from bookingflow.pricing.adapter import quote
from bookingflow.pricing.classifier import BookingTypeClassifier, ClassifierInput
from bookingflow.pricing.engine import PricingRuleEngine
from bookingflow.pricing.invoice import invoice_lines
from bookingflow.schemas.booking_schema import Booking, BookingDraft
from bookingflow.schemas.modification_schema import (
    AdminReview,
    ModificationCreate,
    ModificationRequest,
    NannyResponse,
)
from bookingflow.schemas.pricing_schema import (
    ClassifyRequest,
    ClassifyResponse,
    PricingRequest,
    PricingResponse,
)

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info("Rejected %s: %s", request.url.path, exc)
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return _error(400, f"{field}: {message}" if field else message)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(PermissionDeniedError)
    async def permission_handler(request: Request, exc: PermissionDeniedError):
        logger.warning("Permission denied on %s: %s", request.url.path, exc)
        return _error(403, str(exc))

    @app.exception_handler(InvalidTransitionError)
    async def transition_handler(request: Request, exc: InvalidTransitionError):
        logger.warning("Invalid transition on %s: %s", request.url.path, exc)
        return _error(
            409, str(exc), currentState=exc.current_state, attemptedState=exc.target_state,
        )

    @app.exception_handler(ConcurrencyConflictError)
    async def conflict_handler(request: Request, exc: ConcurrencyConflictError):
        return _error(409, str(exc))


def _build_router(
    engine: PricingRuleEngine,
    classifier: BookingTypeClassifier,
    bookings: BookingService,
    coordinator: ModificationApprovalCoordinator,
) -> APIRouter:
    router = APIRouter()

    @router.post("/pricing", response_model=PricingResponse, response_model_exclude_none=True)
    def calculate_pricing(payload: PricingRequest):
        return quote(payload, engine)

    @router.post("/classify", response_model=ClassifyResponse)
    def classify(payload: ClassifyRequest):
        category, rule = classifier.resolve(ClassifierInput(
            duration_type=payload.duration_type,
            booking_sub_type=payload.booking_sub_type,
            living_arrangement=payload.living_arrangement,
            home_size=payload.home_size,
            context_hints=payload.context_hints,
        ))
        return ClassifyResponse(category=category.value, rule=rule)

    @router.post("/bookings", response_model=Booking, status_code=201)
    def confirm_booking(payload: BookingDraft):
        return bookings.confirm(payload)

    @router.get("/bookings/{booking_id}", response_model=Booking)
    def get_booking(booking_id: str):
        return coordinator.store.get_booking(booking_id)

    @router.get("/bookings/{booking_id}/invoice-lines")
    def get_invoice_lines(booking_id: str):
        booking = coordinator.store.get_booking(booking_id)
        return {
            "bookingId": booking_id,
            "lineItems": [
                {"description": line.description, "amount": float(line.amount)}
                for line in invoice_lines(booking)
            ],
        }

    @router.post(
        "/bookings/{booking_id}/modifications",
        response_model=ModificationRequest,
        status_code=201,
    )
    def submit_modification(booking_id: str, payload: ModificationCreate):
        return coordinator.submit(
            booking_id,
            payload.client_id,
            payload.modification_type,
            payload.services,
            payload.client_notes,
        )

    @router.get("/bookings/{booking_id}/modifications", response_model=list[ModificationRequest])
    def list_modifications(booking_id: str):
        return coordinator.history_for(booking_id)

    @router.get("/modifications/{modification_id}", response_model=ModificationRequest)
    def get_modification(modification_id: str):
        return coordinator.store.get_modification(modification_id)

    @router.post("/modifications/{modification_id}/admin-review", response_model=ModificationRequest)
    def admin_review(modification_id: str, payload: AdminReview):
        return coordinator.admin_review(
            modification_id,
            payload.admin_id,
            approve=payload.decision == "approve",
            admin_notes=payload.admin_notes,
        )

    @router.post("/modifications/{modification_id}/nanny-response", response_model=ModificationRequest)
    def nanny_response(modification_id: str, payload: NannyResponse):
        return coordinator.nanny_respond(
            modification_id,
            payload.nanny_id,
            accept=payload.decision == "accept",
            nanny_notes=payload.nanny_notes,
        )

    return router


def create_app(
    store: Optional[BookingStore] = None,
    notifier: Optional[Notifier] = None,
    engine: Optional[PricingRuleEngine] = None,
) -> FastAPI:
    """Build the API with its own store, engine and coordinator."""
    store = store or BookingStore()
    engine = engine or PricingRuleEngine(cache_size=settings.pricing.quote_cache_size)
    classifier = BookingTypeClassifier()
    bookings = BookingService(store, engine, classifier)
    coordinator = ModificationApprovalCoordinator(store, engine, notifier)

    app = FastAPI(title="Booking Pricing & Modification API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.api.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or f"REQ-{uuid.uuid4().hex[:12]}"
        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    _register_error_handlers(app)
    app.include_router(_build_router(engine, classifier, bookings, coordinator))

    @app.get("/")
    def root():
        return {"service": settings.service_name, "status": "running"}

    app.state.store = store
    app.state.coordinator = coordinator
    return app

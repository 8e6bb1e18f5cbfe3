import asyncio
import logging
import math
from typing import AsyncGenerator, Optional, Union

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from .config import settings
from .errors import DuplicateSlotNumber, InvalidInput, ParkingError, SlotNotFound, ValidationFailed
from .events import EventBus
from .registry import Slot as SlotRecord
from .registry import SlotRegistry
from .schemas import ParkRequest, Slot, SlotCreate, SlotListResponse, SlotResponse, StatsResponse

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> SlotRegistry:
    return request.app.state.registry


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _slot_payload(slot: SlotRecord) -> dict:
    return {"slot": Slot.model_validate(slot).model_dump(by_alias=True)}


def _validate_new_slot(registry: SlotRegistry, req: SlotCreate) -> Union[int, float]:
    """Boundary checks for a new slot; returns the validated slot number."""
    slot_no = req.slot_no
    if isinstance(slot_no, bool) or not isinstance(slot_no, (int, float)) or not math.isfinite(slot_no) or slot_no <= 0:
        raise InvalidInput("Invalid slot number")
    if not req.is_covered and not req.is_ev_charging:
        raise ValidationFailed()
    if registry.find_by_slot_no(slot_no) is not None:
        raise DuplicateSlotNumber()
    return slot_no


async def parking_error_handler(request: Request, exc: ParkingError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.message)
    return _failure(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    detail = "Invalid input"
    if errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"Invalid input: {loc}: {first.get('msg')}" if loc else f"Invalid input: {first.get('msg')}"
    return _failure(400, detail)


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _failure(500, str(exc))


async def event_stream(request: Request, bus: EventBus, keepalive: float) -> AsyncGenerator[bytes, None]:
    queue = bus.subscribe()
    try:
        # initial comment to open stream
        yield b":ok\n\n"
        while True:
            if await request.is_disconnected():
                break
            try:
                data = await asyncio.wait_for(queue.get(), timeout=keepalive)
                yield f"data: {data}\n\n".encode("utf-8")
            except asyncio.TimeoutError:
                # keep-alive
                yield b":keepalive\n\n"
    finally:
        bus.unsubscribe(queue)


async def security_headers_middleware(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Content-Security-Policy", "default-src 'none'; frame-ancestors 'none'")
    return response


def create_app(registry: Optional[SlotRegistry] = None, event_bus: Optional[EventBus] = None) -> FastAPI:
    app = FastAPI(title="Smart Parking Lot")
    app.state.registry = registry if registry is not None else SlotRegistry()
    app.state.event_bus = event_bus if event_bus is not None else EventBus()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(security_headers_middleware)

    app.add_exception_handler(ParkingError, parking_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.post("/api/slots", response_model=SlotResponse, status_code=201)
    async def add_slot(
        req: SlotCreate,
        registry: SlotRegistry = Depends(get_registry),
        bus: EventBus = Depends(get_event_bus),
    ):
        slot_no = _validate_new_slot(registry, req)
        slot = registry.create(slot_no, req.is_covered, req.is_ev_charging)
        await bus.publish_event("slot_added", _slot_payload(slot))
        return SlotResponse(success=True, message="Slot added successfully", slot=Slot.model_validate(slot))

    @app.get("/api/slots", response_model=SlotListResponse)
    async def list_slots(registry: SlotRegistry = Depends(get_registry)):
        return SlotListResponse(slots=[Slot.model_validate(s) for s in registry.list_all()])

    @app.get("/api/slots/available", response_model=SlotListResponse)
    async def list_available_slots(
        needs_ev: bool = Query(False, alias="needsEV"),
        needs_cover: bool = Query(False, alias="needsCover"),
        registry: SlotRegistry = Depends(get_registry),
    ):
        slots = registry.list_available(needs_ev=needs_ev, needs_cover=needs_cover)
        return SlotListResponse(slots=[Slot.model_validate(s) for s in slots])

    @app.get("/api/slots/{slot_id}", response_model=SlotResponse)
    async def get_slot(slot_id: int, registry: SlotRegistry = Depends(get_registry)):
        slot = registry.get_by_id(slot_id)
        if slot is None:
            raise SlotNotFound()
        return SlotResponse(success=True, message="Slot found", slot=Slot.model_validate(slot))

    @app.delete("/api/slots/{slot_id}", response_model=SlotResponse)
    async def remove_vehicle(
        slot_id: int,
        registry: SlotRegistry = Depends(get_registry),
        bus: EventBus = Depends(get_event_bus),
    ):
        slot = registry.release(slot_id)
        await bus.publish_event("vehicle_removed", _slot_payload(slot))
        return SlotResponse(success=True, message="Vehicle removed successfully", slot=Slot.model_validate(slot))

    @app.post("/api/park", response_model=SlotResponse, status_code=201)
    async def park_vehicle(
        req: Optional[ParkRequest] = None,
        registry: SlotRegistry = Depends(get_registry),
        bus: EventBus = Depends(get_event_bus),
    ):
        req = req or ParkRequest()
        slot = registry.allocate(needs_ev=req.needs_ev, needs_cover=req.needs_cover)
        await bus.publish_event("vehicle_parked", _slot_payload(slot))
        return SlotResponse(success=True, message="Vehicle parked successfully", slot=Slot.model_validate(slot))

    @app.get("/api/stats", response_model=StatsResponse)
    async def stats(registry: SlotRegistry = Depends(get_registry)):
        s = registry.stats()
        return StatsResponse(total=s.total, occupied=s.occupied, available=s.available)

    @app.get("/api/events")
    async def sse_events(request: Request, bus: EventBus = Depends(get_event_bus)):
        headers = {"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
        return StreamingResponse(event_stream(request, bus, settings.SSE_KEEPALIVE), media_type="text/event-stream", headers=headers)

    return app

"""
FastAPI routes for the date/time visibility control.

Endpoints:
- GET    /health                     — health check
- GET    /editor-config              — operator, context and field choices for the editor
- GET    /editor-config/fields/{key} — a single date field offered to the editor
- PUT    /fields/{scope}/{field_key} — store a field definition and raw value
- DELETE /fields/{scope}/{field_key} — remove a stored field
- PUT    /records/{record_id}/status — set a record's publication status
- PUT    /portal                     — set the current portal and portal map
- POST   /visibility/test            — run the control-set visibility filter
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from datetime_control.core.editor import (
    build_editor_config,
    filter_date_fields,
    find_field_by_key,
    get_field_type_label,
    get_grouped_field_options,
)
from datetime_control.core.fields import FieldResolver
from datetime_control.core.pipeline import CONTROL_SET_VISIBILITY_HOOK, FilterPipeline, register_filter
from datetime_control.core.store import parse_scope
from datetime_control.core.visibility import VisibilityEngine

logger = logging.getLogger(__name__)

router = APIRouter()

# These will be injected by the app factory
_field_store = None
_portal_system = None
_timezone = None
_diagnostics_logger = None


def configure_routes(field_store, portal_system=None, timezone=None, diagnostics_logger=None):
    """Inject the field store, portal system, timezone and diagnostics logger.

    Called by the app factory during startup.
    """
    global _field_store, _portal_system, _timezone, _diagnostics_logger
    _field_store = field_store
    _portal_system = portal_system
    _timezone = timezone
    _diagnostics_logger = diagnostics_logger


# --- Request / Response Models ---


class FieldWriteRequest(BaseModel):
    """Request body for PUT /fields/{scope}/{field_key}."""

    type: str
    label: str | None = None
    value: str | None = None


class RecordStatusRequest(BaseModel):
    """Request body for PUT /records/{record_id}/status."""

    status: str


class PortalRequest(BaseModel):
    """Request body for PUT /portal."""

    current_portal_id: str | None = None
    portal_map: dict[str, int] = {}


class VisibilityTestRequest(BaseModel):
    """Request body for POST /visibility/test."""

    is_visible: bool = True
    settings: dict[str, Any] = {}
    controls: dict[str, Any] = {}
    current_user_id: int | None = None
    now: datetime | None = None


class VisibilityTestResponse(BaseModel):
    """Response body for POST /visibility/test."""

    visible: bool


def _require_store():
    if _field_store is None:
        raise HTTPException(status_code=500, detail="Server not properly configured")
    return _field_store


def _scope_or_400(scope: str):
    try:
        return parse_scope(scope)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# --- Endpoints ---


@router.get("/editor-config")
async def editor_config():
    """Return the configuration consumed by the editor control."""
    store = _require_store()
    config = build_editor_config(_portal_system)
    groups, _ = filter_date_fields(store.get_field_groups())
    config["fieldOptions"] = get_grouped_field_options(groups)
    return config


@router.get("/editor-config/fields/{field_key}")
async def editor_field(field_key: str):
    """Return one date field the editor can offer, with its type label."""
    store = _require_store()
    _, flat_fields = filter_date_fields(store.get_field_groups())
    field = find_field_by_key(flat_fields, field_key)
    if field is None:
        raise HTTPException(status_code=404, detail=f"Date field '{field_key}' not found")
    return {**field, "typeLabel": get_field_type_label(field["type"])}


@router.put("/fields/{scope}/{field_key}")
async def put_field(scope: str, field_key: str, request: FieldWriteRequest):
    """Store a field's type, label and raw value in a scope."""
    store = _require_store()
    scope_id = _scope_or_400(scope)
    store.set_field(field_key, scope_id, request.type, request.value, request.label)
    return {"success": True, "scope": scope, "field": field_key}


@router.delete("/fields/{scope}/{field_key}")
async def delete_field(scope: str, field_key: str):
    store = _require_store()
    scope_id = _scope_or_400(scope)
    if not store.delete_field(field_key, scope_id):
        raise HTTPException(status_code=404, detail=f"Field '{field_key}' not found in scope '{scope}'")
    return {"success": True}


@router.put("/records/{record_id}/status")
async def put_record_status(record_id: int, request: RecordStatusRequest):
    store = _require_store()
    store.set_record_status(record_id, request.status)
    return {"success": True, "record_id": record_id, "status": request.status}


@router.put("/portal")
async def put_portal(request: PortalRequest):
    """Set the active portal and the portal-to-record map."""
    _require_store()
    if _portal_system is None:
        raise HTTPException(status_code=404, detail="Portal system not enabled")
    _portal_system.current_portal_id = request.current_portal_id
    _portal_system.portal_map = dict(request.portal_map)
    return {"success": True, "current_portal_id": request.current_portal_id, "portal_map": request.portal_map}


@router.post("/visibility/test", response_model=VisibilityTestResponse)
async def visibility_test(request: VisibilityTestRequest):
    """Run the control-set visibility filter for one block.

    Builds a fresh engine per request so the clock and current user are
    snapshots for this evaluation only.
    """
    store = _require_store()

    now_provider = (lambda: request.now) if request.now is not None else None
    engine = VisibilityEngine(
        FieldResolver(store, _portal_system),
        timezone=_timezone,
        now_provider=now_provider,
        current_user_provider=lambda: request.current_user_id,
        logger=_diagnostics_logger,
    )

    pipeline = FilterPipeline()
    register_filter(pipeline, engine)

    visible = pipeline.apply_filters(
        CONTROL_SET_VISIBILITY_HOOK,
        request.is_visible,
        request.settings,
        request.controls,
    )
    logger.info("Visibility test evaluated: %s", "visible" if visible else "hidden")
    return VisibilityTestResponse(visible=visible)


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    field_count = _field_store.count() if _field_store else 0
    return {
        "status": "healthy",
        "stored_fields": field_count,
        "portal_system": _portal_system is not None,
    }

"""API routes for resource health.

Endpoints:
  GET /api/health/resources         — configured resources (no check)
  GET /api/health/check             — check every resource
  GET /api/health/resources/{slug}  — check one resource (?format=summary for text)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import PlainTextResponse

from healthdeck.status import exit_code_for, fleet_status

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get("/health/resources")
def list_resources(request: Request) -> dict[str, Any]:
    """List resources as configured, with whatever results they last had."""
    loader = request.app.state.loader
    return {"resources": loader.to_dict()}


@health_router.get("/health/check")
def check_all(request: Request) -> dict[str, Any]:
    """Check every resource and return the fleet status alongside each one."""
    loader = request.app.state.loader
    resources = loader.check_all("check")
    worst = fleet_status(resources, loader.config.severity)
    return {
        "status": worst.value,
        "exit_code": exit_code_for(worst, loader.config.exit_codes),
        "resources": [r.to_dict() for r in resources],
    }


@health_router.get("/health/resources/{slug}", response_model=None)
def get_resource(slug: str, request: Request, format: str | None = None) -> Any:
    """Check one resource; ``format=summary`` returns the plain-text summary."""
    loader = request.app.state.loader
    resource = loader.get(slug)
    if not resource:
        raise HTTPException(status_code=404, detail=f"Resource not found: {slug}")

    if resource.is_global:
        resource.check_global(loader.resources, "resource")
    else:
        resource.check("resource")

    if format == "summary":
        return PlainTextResponse(resource.get_summary())
    return resource.to_dict()

"""Insights endpoints, including the remotely invoked generation function."""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from api.dependencies import get_generator
from api.schemas import GenerateInsightsRequest
from database.exceptions import DatabaseError
from services.auth import resolve_caller_id
from services.exceptions import InsightsError
from services.insight_generator import InsightGenerator

logger = logging.getLogger(__name__)

router = APIRouter()
function_router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, x-client-info, apikey",
}


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        {"error": message, "timestamp": datetime.now(timezone.utc).isoformat()},
        status_code=500,
        headers=CORS_HEADERS,
    )


async def _read_body(request: Request) -> GenerateInsightsRequest:
    """Missing or invalid bodies are tolerated; identity may come from the token."""
    raw = await request.body()
    if not raw:
        return GenerateInsightsRequest()
    try:
        return GenerateInsightsRequest.model_validate(json.loads(raw))
    except (ValueError, ValidationError):
        logger.warning("No request body or invalid JSON")
        return GenerateInsightsRequest()


@function_router.options("/analyze-golf-performance")
async def analyze_preflight():
    return Response(status_code=204, headers={**CORS_HEADERS, "Access-Control-Max-Age": "86400"})


@function_router.post("/analyze-golf-performance")
async def analyze_golf_performance(
    request: Request,
    authorization: Optional[str] = Header(None),
    generator: InsightGenerator = Depends(get_generator),
):
    """Generate insights for the caller; errors come back as 500 {error, timestamp}."""
    body = await _read_body(request)
    try:
        profile_id = resolve_caller_id(authorization, body.profile_id)
        result = await generator.generate_insights(profile_id, body.round_id)
    except (InsightsError, DatabaseError) as e:
        logger.error("Insight generation failed: %s", e)
        return _error_response(str(e))
    except Exception:
        logger.exception("Unexpected error generating insights")
        return _error_response("Failed to generate insights")
    return JSONResponse(result.to_wire(), headers=CORS_HEADERS)


@router.get("/{profile_id}/latest")
async def get_latest_insights(
    profile_id: str, generator: InsightGenerator = Depends(get_generator)
):
    try:
        record = await generator.get_latest_insights(profile_id)
    except ValueError:
        raise HTTPException(404, "No insights found")
    except DatabaseError as e:
        raise HTTPException(500, str(e))
    if not record:
        raise HTTPException(404, "No insights found")
    return record

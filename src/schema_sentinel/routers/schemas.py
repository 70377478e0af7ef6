"""
Schemas Router
===============
Admin API over the sentinel: tracked endpoints, their baselines and history,
and two actions (observe a response, diff two schemas).

The Sentinel instance is read from ``app.state.sentinel``.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from schema_sentinel.services.sentinel import Sentinel
from schema_sentinel.utils.reporting import ContractChangeReporter

logger = logging.getLogger("schema_sentinel")

router = APIRouter()

reporter = ContractChangeReporter()


def get_sentinel(request: Request) -> Sentinel:
    return request.app.state.sentinel


async def _json_body(request: Request) -> dict:
    try:
        data = await request.json()
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Request body must be JSON") from None
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return data


@router.get("/admin/schemas")
def list_schemas(sentinel: Sentinel = Depends(get_sentinel)):
    """All endpoints with an active baseline."""
    result = []
    for key in sentinel.store.all():
        schema = sentinel.store.get(key)
        if schema is None:
            continue
        result.append({
            "endpoint": key,
            "version": schema.version,
            "sampleCount": schema.sample_count,
            "hardenedAt": schema.hardened_at.isoformat(),
        })
    return result


@router.get("/admin/schemas/detail")
def get_schema(endpoint: str, sentinel: Sentinel = Depends(get_sentinel)):
    schema = sentinel.store.get(endpoint)
    if schema is None:
        raise HTTPException(status_code=404, detail=f"No hardened schema for {endpoint}")
    return schema.to_dict()


@router.get("/admin/schemas/history")
def get_schema_history(endpoint: str, sentinel: Sentinel = Depends(get_sentinel)):
    return [schema.to_dict() for schema in sentinel.store.archives(endpoint)]


@router.get("/admin/schemas/samples")
def get_pending_samples(endpoint: str, sentinel: Sentinel = Depends(get_sentinel)):
    return {
        "endpoint": endpoint,
        "hardened": sentinel.store.has(endpoint),
        "pending": len(sentinel.store.get_samples(endpoint)),
        "threshold": sentinel.config.sample_threshold,
    }


@router.post("/admin/observe")
async def observe_response(request: Request, sentinel: Sentinel = Depends(get_sentinel)):
    """
    Feed one response into the sentinel, e.g. from a service that cannot use
    the httpx watcher.

    Body: {"method": "GET", "uri": "/orders/1", "status_code": 200, "payload": {...}}
    """
    data = await _json_body(request)
    if "uri" not in data or "payload" not in data:
        raise HTTPException(status_code=400, detail="'uri' and 'payload' are required")

    try:
        status_code = int(data.get("status_code", 200))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="'status_code' must be an integer") from None

    drift = await run_in_threadpool(
        sentinel.process,
        str(data.get("method", "GET")),
        str(data["uri"]),
        status_code,
        data["payload"],
    )
    return {"drift": reporter.generate(drift) if drift is not None else None}


@router.post("/admin/diff")
async def diff_schemas(request: Request, sentinel: Sentinel = Depends(get_sentinel)):
    """
    Body: {"baseline": <document or schema node>, "current": <document or schema node>}
    """
    data = await _json_body(request)
    baseline = data.get("baseline")
    current = data.get("current")
    if not isinstance(baseline, dict) or not isinstance(current, dict):
        raise HTTPException(status_code=400, detail="'baseline' and 'current' must be JSON objects")

    try:
        drift = sentinel.diff(baseline, current)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"❌ Could not diff schemas: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid schema document: {e}") from None

    if drift is None:
        return {"drift": None}
    return reporter.generate(drift)

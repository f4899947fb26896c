"""Operaciones de control de la sesión OEE.

- GET /oee/status: estado, data source y estadísticas del writer
- POST /oee/recalculate: un tick síncrono
- PUT /oee/data-source: re-apuntar la sesión a otro metrics root
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from oee_engine.runners.oee_runner import OEECalculatorSession
from oee_engine.store.metrics_store import NodeId

from ..schemas import DataSourceIn, DataSourceResult, RecalculateResult, SessionStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/oee", tags=["oee"])


def get_session(request: Request) -> OEECalculatorSession:
    return request.app.state.session


@router.get("/status", response_model=SessionStatus)
def status(session: OEECalculatorSession = Depends(get_session)):
    stats = session.get_stats()
    last = session.last_result
    stats["last_result"] = last.to_dict() if last else None
    return stats


@router.post("/recalculate", response_model=RecalculateResult)
def recalculate(session: OEECalculatorSession = Depends(get_session)):
    if session.root is None:
        raise HTTPException(status_code=409, detail="No data source bound")

    result = session.force_recalculate()
    if result is None:
        raise HTTPException(status_code=500, detail="Recalculation failed")

    return {
        "oee": result.metrics.oee,
        "quality": result.metrics.quality,
        "performance": result.metrics.performance,
        "availability": result.metrics.availability,
        "status": result.status.value,
        "writes": result.writes,
        "result": result.to_dict(),
    }


@router.put("/data-source", response_model=DataSourceResult)
def set_data_source(payload: DataSourceIn, session: OEECalculatorSession = Depends(get_session)):
    reference = payload.reference
    if payload.namespace is not None:
        reference = NodeId(reference, payload.namespace)

    if not session.set_data_source(reference):
        logger.warning("[API] data source %r rejected", payload.reference)
        raise HTTPException(status_code=409, detail=f"Cannot resolve data source {payload.reference!r}")

    return {"data_source": session.describe_data_source(), "state": session.state.value}

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class DataSourceIn(BaseModel):
    # Identificador o path ("Plant/Line1/Press"); con namespace -> NodeId
    reference: str = Field(..., min_length=1)
    namespace: Optional[int] = Field(default=None, ge=0)

    @field_validator("reference", mode="before")
    @classmethod
    def strip_reference(cls, v):
        # antes de min_length: "   " cuenta como referencia vacía
        if isinstance(v, str):
            return v.strip()
        return v


class DataSourceResult(BaseModel):
    data_source: str
    state: str


class WriterStats(BaseModel):
    writes: int
    skipped_unchanged: int
    skipped_missing: int
    skipped_open: int
    failures: int
    bound_outputs: int
    open_outputs: List[Dict[str, Any]] = Field(default_factory=list)


class SessionStatus(BaseModel):
    name: str
    state: str
    data_source: str
    reference: str
    ticks: int
    errors: int
    last_error: Optional[str] = None
    update_rate_ms: int
    history_samples: int
    last_tick: Optional[str] = None
    writer: WriterStats
    last_result: Optional[Dict[str, Any]] = None


class RecalculateResult(BaseModel):
    oee: float
    quality: float
    performance: float
    availability: float
    status: str
    writes: int
    result: Dict[str, Any]

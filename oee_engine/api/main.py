from __future__ import annotations

from fastapi import FastAPI

from oee_engine.runners.oee_runner import OEECalculatorSession

from .endpoints import health_router, oee_router


def create_app(session: OEECalculatorSession) -> FastAPI:
    """App de control para una sesión ya construida (arrancada o no)."""

    app = FastAPI(title="OEE Engine", version="0.1.0")
    app.state.session = session
    app.include_router(health_router)
    app.include_router(oee_router)
    return app

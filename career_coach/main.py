import logging
from typing import Dict

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from .config import Settings, get_settings
from .db.monitoring import get_pool_snapshot
from .db.session import get_engine
from .errors import CareerCoachError
from .logging_config import configure_logging
from .profile_routes import ERROR_STATUS_CODES, router as profile_router


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Career Coach Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(profile_router)

settings_snapshot = get_settings()
logger.info("Backend starting with insight model: %s", settings_snapshot.insight_model)
logger.info("OpenAI API key configured: %s", bool(settings_snapshot.openai_api_key))


@app.exception_handler(CareerCoachError)
async def career_coach_error_handler(request: Request, exc: CareerCoachError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(
        status_code=status_code,
        content={"kind": exc.kind.value, "detail": exc.message},
    )


@app.get("/healthz")
def health(settings: Settings = Depends(get_settings)) -> Dict[str, str]:
    return {"status": "ok", "insight_model": settings.insight_model}


@app.get("/healthz/database")
def database_health() -> Dict[str, object]:
    try:
        engine = get_engine()
        with engine.connect() as connection:
            connection.exec_driver_sql("SELECT 1")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Database health check failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return {"status": "ok", "pool": get_pool_snapshot(engine)}

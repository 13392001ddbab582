import logging
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.orm import Session

from mediabox.core.config import Disk, MediaBoxConfig, settings
from mediabox.core.database import Base, engine, get_db
from mediabox.core.exceptions import (
    BackendError,
    BoxAlreadyExists,
    ContentAlreadyExists,
    DirectoryAlreadyExists,
    InvalidContent,
    InvalidFilter,
    MediaBoxError,
    QuotaExceeded,
    UnsupportedMimeType,
)
from mediabox.dependencies import get_backend, get_config
from mediabox.monitoring.setup import setup_monitoring
from mediabox.routes import boxes, contents
from mediabox.storage import StorageBackend

logger = logging.getLogger("mediabox")

ERROR_STATUS = {
    BoxAlreadyExists: 409,
    ContentAlreadyExists: 409,
    DirectoryAlreadyExists: 409,
    QuotaExceeded: 413,
    UnsupportedMimeType: 415,
    InvalidContent: 422,
    InvalidFilter: 400,
    BackendError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database ready: %s", ", ".join(sorted(Base.metadata.tables)))
    except Exception as e:
        logger.error("Database initialization failed: %s", e)
        raise

    try:
        config = get_config()
        get_backend()
        logger.info("Storage backend ready: disk=%s prefix=%s", config.disk.value, config.prefix)
    except Exception as e:
        logger.error("Storage initialization failed: %s", e)
        raise

    yield

    logger.info("Application shutdown complete")


app = FastAPI(
    title="MediaBox",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(MediaBoxError)
async def mediabox_error_handler(request: Request, exc: MediaBoxError):
    status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    if status_code >= 500:
        logger.error("Storage failure: %s %s -> %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


app.include_router(boxes)
app.include_router(contents)

if get_config().disk is Disk.LOCAL and settings.PUBLIC_BASE_URL.startswith("/"):
    app.mount(
        settings.PUBLIC_BASE_URL.rstrip("/"),
        StaticFiles(directory=settings.LOCAL_ROOT, check_dir=False),
        name="storage",
    )

setup_monitoring(app)


@app.get("/health")
def health_check(
    db: Session = Depends(get_db),
    config: MediaBoxConfig = Depends(get_config),
    backend: StorageBackend = Depends(get_backend),
):
    checks = {}
    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    try:
        backend.exists(f"{config.prefix}/.health")
        checks["storage"] = "ok"
    except Exception as e:
        checks["storage"] = f"error: {e}"

    healthy = all(v == "ok" for v in checks.values())
    return {
        "status": "ok" if healthy else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "disk": config.disk.value,
        **checks,
    }


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info",
        timeout_keep_alive=60,
        limit_concurrency=100
    )

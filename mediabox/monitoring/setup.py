import logging
import time

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.types import ASGIApp

logger = logging.getLogger("mediabox")

uploads_total = Counter("mediabox_uploads_total", "Successful content uploads")
upload_failures = Counter("mediabox_upload_failures_total", "Failed content uploads", ["reason"])
quota_rejections = Counter("mediabox_quota_rejections_total", "Uploads rejected by the box quota")
upload_bytes = Histogram(
    "mediabox_upload_bytes",
    "Stored size of uploaded content in bytes",
    buckets=(1024, 16 * 1024, 128 * 1024, 1024 * 1024, 8 * 1024 * 1024, 64 * 1024 * 1024),
)
box_deletions = Counter("mediabox_box_deletions_total", "Media boxes deleted", ["trigger"])


def report_upload(size: int) -> None:
    uploads_total.inc()
    upload_bytes.observe(size)


def report_upload_failure(reason: str) -> None:
    upload_failures.labels(reason=reason).inc()
    if reason == "quota_exceeded":
        quota_rejections.inc()


def report_box_deleted(trigger: str) -> None:
    box_deletions.labels(trigger=trigger).inc()


def setup_monitoring(app: ASGIApp):
    Instrumentator().instrument(app).expose(app, endpoint="/api/metrics", include_in_schema=False)

    @app.middleware("http")
    async def monitor_requests(request: Request, call_next):
        start_time = time.time()
        response = None
        try:
            response = await call_next(request)
        except HTTPException as e:
            logger.exception("HTTP exception: %s %s -> %s", request.method, request.url.path, e.detail)
            response = JSONResponse(status_code=e.status_code, content={"detail": e.detail})
        except Exception as e:
            logger.exception("Unhandled error: %s %s -> %s", request.method, request.url.path, e)
            response = JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
        finally:
            process_time = time.time() - start_time
            logger.info("method=%s path=%s status=%s duration=%.4fs",
                        request.method, request.url.path,
                        getattr(response, "status_code", "?"), process_time)
        return response

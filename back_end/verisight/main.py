import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from verisight.api.v1.router import router as v1_router
from verisight.core.exceptions import (
    ConflictError, DetectionServiceError, InvalidStatField, NotFoundError,
)
from verisight.core.logging import configure_logging
from verisight.routers.health import router as health_router
from verisight.services.detection_client import close_detection_client

# DB 관련 import (Base / engine)
from verisight.db.base import Base
from verisight.db.session import engine

# 모델들을 등록하기 위해 import (Base.metadata에 모델이 올라가도록)
import verisight.db.models  # noqa: F401

logger = logging.getLogger(__name__)

app = FastAPI(
    title="VeriSight API",
    description="Content verification: detection pass-through, analyses and community voting.",
    version="0.1.0",
)

app.include_router(v1_router, prefix="/api/v1")
app.include_router(health_router)


@app.on_event("startup")
def on_startup():
    configure_logging()
    # 개발 단계 편의용: 테이블 자동 생성 (운영은 alembic)
    Base.metadata.create_all(bind=engine)
    logger.info("VeriSight API started")


@app.on_event("shutdown")
def on_shutdown():
    close_detection_client()


# crud 계층의 도메인 예외 -> HTTP 응답
@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": f"{exc.kind} not found"})


@app.exception_handler(ConflictError)
def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.warning("conflict on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(InvalidStatField)
def invalid_stat_handler(request: Request, exc: InvalidStatField) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(DetectionServiceError)
def detection_error_handler(request: Request, exc: DetectionServiceError) -> JSONResponse:
    logger.error("detection service error on %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=502, content={"detail": exc.message})

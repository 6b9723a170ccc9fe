import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tracker.api import models  # noqa: F401  (테이블 등록)
from tracker.api.cache import init_cache
from tracker.api.database import Base, engine
from tracker.api.exceptions import StorageError, TrackerException, error_body
from tracker.api.logging_config import logger
from tracker.api.routes import projects
from tracker.config import config

Base.metadata.create_all(bind=engine)


app = FastAPI(
    title="Project Tracker API",
    description="프로젝트 현황 대시보드용 조회/검색/통계 API",
    version="0.1.0",
)

# Gzip 압축 미들웨어 추가
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.on_event("startup")
async def startup():
    init_cache()


# Prometheus 모니터링 초기화 (테스트 환경 제외)
if os.getenv("APP_ENV") != "test":
    Instrumentator().instrument(app).expose(app)
    logger.info("Prometheus Instrumentator initialized")


@app.exception_handler(TrackerException)
async def tracker_exception_handler(request: Request, exc: TrackerException):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.detail))


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Storage failure on {request.method} {request.url.path}: {exc}")
    error = StorageError()
    message = str(exc) if config.get("api", "detailed_errors", False) else error.detail
    return JSONResponse(status_code=error.status_code, content=error_body(error.kind, message))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content=error_body("validation_error", problems))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(f"http_{exc.status_code}", exc.detail),
        headers=getattr(exc, "headers", None),
    )


# 라우터 포함
app.include_router(projects.router, prefix=config.get("api", "prefix", "/projects"), tags=["projects"])

# CORS 설정
allowed_origins_raw = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173")
origins = [origin.strip() for origin in allowed_origins_raw.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Response: {response.status_code}")
    return response


@app.get("/")
def read_root():
    return {"message": "Project Tracker API가 실행 중입니다!"}


@app.get("/health")
def health_check():
    return {"status": "ok"}

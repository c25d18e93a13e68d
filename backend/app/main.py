import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from app.api.router import api_router
from app.config import settings
from app.database import Base, engine
from app.models.file import UploadedFile  # noqa: F401
from app.services.storage import PUBLIC_URL_PREFIX

logger = logging.getLogger("app")


def _setup_logging() -> None:
    """애플리케이션 로깅을 설정한다."""
    log_format = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"
    date_format = "%H:%M:%S"
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        stream=sys.stderr,
        force=True,
    )

    # 외부 라이브러리 로그는 WARNING 이상만, 앱 로그만 상세 출력
    logging.getLogger().setLevel(logging.WARNING)
    logging.getLogger("app").setLevel(level)

    # multipart 파서의 청크 단위 디버그 로그는 불필요
    logging.getLogger("multipart").setLevel(logging.WARNING)


_setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="VISA Dossier Management",
    description="신분증명, 증빙서류, 증명서 문서를 업로드하고 카테고리별로 관리합니다.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error envelope: {"success": false, "message": ...}
# ---------------------------------------------------------------------------

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = {"success": False, "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = str(err["loc"][-1]) if err.get("loc") else "request"
        errors.setdefault(field, []).append(err.get("msg", "Invalid value."))
    message = next(iter(errors.values()))[0] if errors else "The given data was invalid."
    return JSONResponse(status_code=422, content={"success": False, "message": message, "errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error."})


app.include_router(api_router, prefix="/api/v1")

Path(settings.storage_root).mkdir(parents=True, exist_ok=True)
app.mount(PUBLIC_URL_PREFIX, StaticFiles(directory=settings.storage_root), name="storage")

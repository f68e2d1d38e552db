from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse

from app.api.v1.router import router as v1_router
from app.config import settings
from app.database import SessionLocal
from app.logging_config import setup_logging
from app.services.auth import ensure_default_admin

# Setup application logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 只有在兩個設定都有提供時才建立預設管理員帳號
    if settings.DEFAULT_ADMIN_EMAIL and settings.DEFAULT_ADMIN_PASSWORD:
        db = SessionLocal()
        try:
            ensure_default_admin(db, settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)
        finally:
            db.close()
    logger.info(f"File store started - storage backend: {settings.STORAGE_BACKEND}")
    yield


# title參數: 設定 API的標題名稱，會顯示在Swagger UI (/docs)與ReDoc (/redoc)
app = FastAPI(title="File Store API", lifespan=lifespan)

# prefix參數設定URL路徑前綴，所有透過v1_router定義的endpoint都會加上這個前綴
app.include_router(v1_router, prefix="/api/v1")


# 統一處理FastAPI拋出的HTTPException
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Unwrap the 'detail' field from HTTPException responses."""
    content = exc.detail

    if isinstance(content, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=exc.headers,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": "Unauthorized" if exc.status_code == 401 else "Error",
            "message": content
        },
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    # Log detailed error for debugging (includes stack trace)
    logger.error(
        f"Unhandled exception: {exc.__class__.__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    # Return safe, static message to client (no internal details exposed)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
        },
    )

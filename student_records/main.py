import asyncio
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from student_records.core.config import settings
from student_records.core.logger import logger
from contextlib import asynccontextmanager
from student_records.core.database import Database
from student_records.api.v1.api import api_router
from student_records.models import mark, student


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        message = error.get("msg", "Invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def create_app(database: Database = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} environment")
        logger.debug(f"Database URL: {app.state.db.engine.url!r}")

        try:
            await app.state.db.create_all()
            logger.success("База данных успешно инициализирована!")
        except Exception as e:
            logger.critical(f"Ошибка инициализации базы данных: {e}")
            raise

        yield

        logger.info(f"Shutting down {settings.PROJECT_NAME}")
        await app.state.db.dispose()
        logger.debug("База данных ликвидирована")

    app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0", lifespan=lifespan)
    app.state.db = database or Database()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_timeout(request: Request, call_next):
        if settings.REQUEST_TIMEOUT_SECONDS <= 0:
            return await call_next(request)
        try:
            return await asyncio.wait_for(call_next(request), timeout=settings.REQUEST_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            logger.error(f"[ТАЙМАУТ] {request.method} {request.url.path} дольше {settings.REQUEST_TIMEOUT_SECONDS} с")
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content={"success": False, "error": "Request timed out"}
            )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # not-found carries "message", everything else "error"
        key = "message" if exc.status_code == status.HTTP_404_NOT_FOUND else "error"
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, key: str(exc.detail)},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _format_validation_errors(exc)
        logger.warning(f"[ВАЛИДАЦИЯ] {request.method} {request.url.path}: {message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": message}
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Необработанная ошибка на {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(exc) or "Internal server error"}
        )

    @app.get("/healthz", tags=["Health"])
    async def healthz():
        return {"status": "ok"}

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run("student_records.main:app", host=settings.HOST, port=settings.PORT)

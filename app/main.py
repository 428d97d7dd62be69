from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.analytics.router import router as analytics_router
from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.auth.router import router as auth_router
from app.api.v1.exams.router import router as exams_router
from app.api.v1.students.router import router as students_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.core.middleware import RequestContextMiddleware


def _error_field(loc) -> str:
    parts = list(loc)
    # Drop the request part ("body", "query", "path") unless it is all we have
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(str(p) for p in parts)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first invalid field as a 400 instead of FastAPI's default 422."""
    errors = exc.errors()
    first = errors[0] if errors else {"loc": ("body",), "msg": "Invalid request"}
    field = _error_field(first.get("loc", ()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {"message": f"{field}: {first.get('msg')}", "field": field}},
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(title="Classroom Register")

    # CORS: allow the frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(students_router)
    app.include_router(attendance_router)
    app.include_router(exams_router)
    app.include_router(analytics_router)

    @app.get("/health", tags=["health"])
    async def healthcheck():
        return {"status": "ok"}

    return app


app = create_app()

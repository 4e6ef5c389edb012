import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from watermark_app.config import Settings
from watermark_app.deps import init_store
from watermark_app.errors import WatermarkAppError
from watermark_app.routes import admin, api, auth, public

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def app_error_handler(request: Request, exc: WatermarkAppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error(400, message)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one Settings value"""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine, session_factory = init_store(settings)
        app.state.engine = engine
        app.state.session_factory = session_factory
        yield
        engine.dispose()

    app = FastAPI(title="Watermark", description="Diagonal text watermarks for PNG/JPEG images", lifespan=lifespan)
    app.state.settings = settings

    # Mount static files
    app.mount("/static", StaticFiles(directory=Path(__file__).parent / "static"), name="static")

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # For production, restrict to your domain
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(WatermarkAppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include routers
    app.include_router(public.router)
    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(api.router, prefix="/api")
    app.include_router(admin.router, prefix="/api/admin")

    @app.get("/health")
    def health_check():
        """Health check endpoint for monitoring"""
        return {"status": "healthy"}

    return app


app = create_app()

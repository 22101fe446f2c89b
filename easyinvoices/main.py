import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    models,  # noqa: F401
    models_invoice,  # noqa: F401
)
from .config import INVOICES_BASE_URL, INVOICES_DIR
from .csrf import csrf_token_handler
from .database import Base, engine
from .errors import AppError, BadArgumentError
from .routes.backend_api import router as backend_api_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("Database tables created successfully")
    INVOICES_DIR.mkdir(parents=True, exist_ok=True)

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Easy!Invoices API", version="1.0.0", lifespan=lifespan)


def exceptions_response(status_code: int, *errors: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"exceptions": [error.to_dict() for error in errors]},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Report domain errors the way the admin page expects them"""
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.kind} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"⚠️ {exc.kind} on {request.url.path}: {exc.message}")
    return exceptions_response(exc.status_code, exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed form fields are bad arguments"""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    fields = [".".join(str(part) for part in error.get("loc", ())[1:]) for error in exc.errors()]
    return exceptions_response(
        400, BadArgumentError("Invalid or missing request fields: " + ", ".join(fields))
    )


app.include_router(backend_api_router)
app.add_api_route("/csrf-token", csrf_token_handler, methods=["GET"], tags=["Security"])
# Serve rendered invoices when file links are site-relative
if INVOICES_BASE_URL.startswith("/"):
    app.mount(
        INVOICES_BASE_URL,
        StaticFiles(directory=INVOICES_DIR, check_dir=False),
        name="invoices",
    )


@app.get("/health")
async def health_check():
    return {"status": "ok"}

import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db
from .errors import FetchError, VokabelError
from .log_handler import SQLiteHandler
from .router import router

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# --- Logging Setup ---
def setup_logging():
    logger = logging.getLogger("vokabel")
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR, exist_ok=True)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    if settings.LOG_TO_DB and not any(isinstance(h, SQLiteHandler) for h in logger.handlers):
        init_db()
        db_handler = SQLiteHandler()
        db_handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(db_handler)

    # Also configure root logger to see logs from other libraries
    logging.basicConfig(level=logging.INFO)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.getLogger("vokabel").info(
        f"Starting {settings.PROJECT_NAME} (verb schema {settings.VERB_SCHEMA})"
    )
    yield


# --- Error Handlers ---
async def fetch_error_handler(request: Request, exc: FetchError):
    logging.getLogger("vokabel").error(f"Dataset fetch failed: {exc}")
    return JSONResponse({"error": str(exc), "status": exc.status}, status_code=502)


async def vokabel_error_handler(request: Request, exc: VokabelError):
    return JSONResponse({"error": str(exc)}, status_code=400)


# --- App Factory ---
def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan,
        root_path=settings.ROOT_PATH,
    )

    app.add_exception_handler(FetchError, fetch_error_handler)
    app.add_exception_handler(VokabelError, vokabel_error_handler)

    app.include_router(router)

    return app

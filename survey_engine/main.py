"""FastAPI application entry point."""
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from contextlib import asynccontextmanager

from survey_engine.config import get_settings
from survey_engine.version import APP_VERSION
from survey_engine.routers import health, surveys
from survey_engine.utils.exceptions import SurveyEngineException

# Create logs directory if it doesn't exist
logs_dir = Path("logs")
logs_dir.mkdir(exist_ok=True)

log_file = logs_dir / "survey_engine.log"
sql_log_file = logs_dir / "survey_engine_sql.log"
api_log_file = logs_dir / "survey_engine_api.log"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Rotating file handler for general logs (1MB max size, keep 5 backup files)
rotating_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))

sql_rotating_handler = RotatingFileHandler(sql_log_file, maxBytes=1024 * 1024, backupCount=5, encoding='utf-8')
sql_rotating_handler.setFormatter(logging.Formatter(LOG_FORMAT))

api_rotating_handler = RotatingFileHandler(api_log_file, maxBytes=2 * 1024 * 1024, backupCount=5, encoding='utf-8')
api_rotating_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))

# Force=True overrides any existing configuration (e.g., from uvicorn)
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    handlers=[
        logging.StreamHandler(),
        rotating_handler,
    ],
    force=True,
)

logger = logging.getLogger(__name__)

# Dedicated API request logger
api_logger = logging.getLogger("survey_engine.api")
api_logger.handlers.clear()
api_logger.addHandler(api_rotating_handler)
api_logger.setLevel(logging.INFO)
api_logger.propagate = False

# SQLAlchemy engine logs go to their own file
sqlalchemy_logger = logging.getLogger("sqlalchemy.engine.Engine")
sqlalchemy_logger.handlers.clear()
sqlalchemy_logger.addHandler(sql_rotating_handler)
sqlalchemy_logger.setLevel(logging.INFO)
sqlalchemy_logger.propagate = False


class SQLTransactionFilter(logging.Filter):
    def filter(self, record):
        if record.levelno == logging.INFO and hasattr(record, 'getMessage'):
            message = record.getMessage()

            # Drop transaction chatter completely
            if any(keyword in message for keyword in ['ROLLBACK', 'BEGIN', 'COMMIT', 'generated in']):
                return False

            # Collapse multi-line statements onto one line
            if any(kw in message for kw in ['SELECT', 'DELETE', 'INSERT', 'UPDATE']):
                record.msg = ' '.join(message.split())
                record.args = ()

        return True


sqlalchemy_logger.addFilter(SQLTransactionFilter())

settings = get_settings()


@asynccontextmanager
async def lifespan(app_instance: FastAPI):
    """Log startup and shutdown."""
    logger.info("=" * 60)
    logger.info("Survey Engine API Starting")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'SQLite'}")
    logger.info("=" * 60)
    try:
        yield
    finally:
        logger.info("Survey Engine API Shutting Down... Goodbye!")


app = FastAPI(
    title="Survey Engine API",
    description="Survey response aggregation, insights and exports",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with user-friendly messages."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    errors = []
    for error in exc.errors():
        loc = error.get("loc", [])
        field_path = " -> ".join(str(x) for x in loc[1:]) if len(loc) > 1 else "unknown field"
        errors.append({
            "field": field_path,
            "message": error.get("msg", "Validation error"),
            "type": error.get("type", "unknown"),
        })

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": errors
        }
    )


@app.exception_handler(SurveyEngineException)
async def survey_engine_exception_handler(request: Request, exc: SurveyEngineException):
    """Last-resort handler for domain errors a router did not translate."""
    logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "internal_error"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with status code and timing."""
    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"
    method = request.method
    path = request.url.path
    request_id = f"{method}:{path}:{int(start_time * 1000) % 100000}"

    api_logger.info(f">> {request_id} | START | {method} {path} | IP: {client_ip}")
    if request.query_params:
        api_logger.info(f">> {request_id} | QUERY | {request.query_params}")

    try:
        response = await call_next(request)
    except Exception as e:
        api_logger.error(
            f"<< {request_id} | EXCEPTION | {method} {path} | "
            f"Error: {str(e)[:100]} | Time: {time.time() - start_time:.3f}s"
        )
        raise

    api_logger.info(
        f"<< {request_id} | COMPLETE | {method} {path} | "
        f"Status: {response.status_code} | Time: {time.time() - start_time:.3f}s"
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["health"])
app.include_router(surveys.router, tags=["surveys"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Survey Engine API",
        "version": APP_VERSION,
        "environment": settings.environment,
        "docs": "/docs",
    }

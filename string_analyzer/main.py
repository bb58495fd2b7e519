from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import os

from string_analyzer.database import init_db
from string_analyzer.api.routes import router

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized successfully")
    yield


app = FastAPI(
    title="String Analyzer Service",
    description="Analyze strings and store their computed properties",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", response_class=PlainTextResponse)
def root():
    """Liveness check"""
    return "String Analyzer API is running!"


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


app.include_router(router, tags=["strings"])


# ------------------------------------------------------------------------------
# ERROR HANDLERS
# ------------------------------------------------------------------------------
def _is_value_type_error(error: dict) -> bool:
    """True for a non-null ``value`` in the request body that is not a string"""
    return (
        tuple(error.get("loc", ()))[-1:] == ("value",)
        and error.get("type") == "string_type"
        and error.get("input") is not None
    )


def _describe(error: dict) -> str:
    field = error["loc"][-1] if error.get("loc") else "body"
    if error.get("type") in ("missing", "string_too_short") or error.get("input", ...) is None:
        return f'Missing "{field}" field'
    if _is_value_type_error(error):
        return 'Invalid data type for "value" (must be string)'
    if error.get("type") == "extra_forbidden":
        return f'Unexpected field "{field}"'
    return "Invalid request body"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    details = {}
    for error in errors:
        field = str(error["loc"][-1]) if error.get("loc") else "body"
        details[field] = error["msg"]

    # A present but non-string value is the only 422; other shape problems are 400
    if errors and all(_is_value_type_error(e) for e in errors):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    return JSONResponse(
        status_code=status_code,
        content={
            "error": _describe(errors[0]) if errors else "Invalid request",
            "details": details
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # If detail is already a dict with 'error' key, return as is
    if isinstance(exc.detail, dict) and 'error' in exc.detail:
        content = exc.detail
    else:
        content = {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Database error",
            "details": str(exc)
        }
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error"
        }
    )


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 3000))
    uvicorn.run("string_analyzer.main:app", host="0.0.0.0", port=port)

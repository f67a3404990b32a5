from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from smartcharge.api import campaigns, endpoints, users
from smartcharge.core.config import settings
from smartcharge.core.database import Base, engine
from smartcharge.core.errors import SmartChargeError, StoreError
import smartcharge.models  # registers tables on Base.metadata
import uvicorn

app = FastAPI(title=settings.PROJECT_NAME, version=settings.PROJECT_VERSION)

# Configure logging
logger.add(settings.LOG_FILE, rotation=settings.LOG_ROTATION)

# Disable default Gunicorn error logging
import logging
gunicorn_error_logger = logging.getLogger("gunicorn.error")
gunicorn_error_logger.handlers = []

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create the database tables
@app.on_event("startup")
def startup_event():
    Base.metadata.create_all(bind=engine)
    logger.info(f"{settings.PROJECT_NAME} {settings.PROJECT_VERSION} started")

def error_response(status_code: int, code: str, message: str):
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, "code": code})

@app.exception_handler(SmartChargeError)
async def smartcharge_error_handler(request: Request, exc: SmartChargeError):
    if isinstance(exc, StoreError) or exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.code}): {exc.message}")
    return error_response(exc.status_code, exc.code, exc.message)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in errors) or "Invalid input"
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return error_response(400, "VALIDATION_ERROR", message)

@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} store failure: {exc}")
    return error_response(500, StoreError.code, StoreError.default_message)

app.include_router(endpoints.router)
app.include_router(campaigns.router)
app.include_router(users.router)

@app.get("/health")
def health_check():
    return {"status": "healthy", "version": settings.PROJECT_VERSION}

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8080, log_level="info")

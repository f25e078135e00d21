from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from .api.v1.auth import router as auth_router
from .api.v1.availability import router as availability_router
from .api.v1.vaccines import router as vaccines_router
from .api.v1.appointments import router as appointments_router
from .core.config import settings
from .core.database import init_db
from .core.exceptions import SchedulerError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
ROUTERS = (auth_router, availability_router, vaccines_router, appointments_router)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema before serving; log the database backend in use."""
    db_url = settings.get_database_url
    backend = db_url.split(":", 1)[0].split("+", 1)[0]
    logger.info(f"Starting {settings.APP_NAME} {settings.VERSION} on {backend}")

    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {str(e)}")
        raise

    yield
    logger.info(f"Stopping {settings.APP_NAME}")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Matches patients to caregiver availability while tracking vaccine doses",
    openapi_url=f"{API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not settings.TESTING:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["localhost", "127.0.0.1", "*.localhost"]
    )

@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.4f}s)")
    return response

@app.exception_handler(SchedulerError)
async def scheduler_error_handler(request: Request, exc: SchedulerError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.__class__.__name__, "message": exc.message}
    )

@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "message": getattr(exc, "detail", None) or "The requested resource was not found",
            "path": str(request.url.path)
        }
    )

for router in ROUTERS:
    app.include_router(router, prefix=API_PREFIX)

@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": time.time(), "version": settings.VERSION}

@app.get(API_PREFIX)
async def api_info():
    """Name, version and the mounted resource paths."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "resources": sorted(f"{API_PREFIX}{router.prefix}" for router in ROUTERS),
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "vaccine_scheduler.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )

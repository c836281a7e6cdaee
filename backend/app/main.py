import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import ReviewPipelineError
from app.api import auth, locations, reviews, webhooks
from app.api import review_templates as review_templates_api
from app.api import review_requests as review_requests_api
from app.api import crm_integrations as crm_integrations_api

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def init_database():
    """Create tables on startup."""
    from app.core.database import engine, Base
    from app import models  # noqa: F401  registers every table on Base.metadata

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_database()
    yield


# Disable API docs in production
docs_url = "/docs" if settings.ENVIRONMENT != "production" else None
redoc_url = "/redoc" if settings.ENVIRONMENT != "production" else None

app = FastAPI(
    title=settings.APP_NAME,
    description="RepuRadar - review monitoring and review request API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)


# Global exception handlers - always return JSON (never plain text)
@app.exception_handler(ReviewPipelineError)
async def pipeline_exception_handler(request, exc: ReviewPipelineError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "detail": f"Internal error: {str(exc)}"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# CORS - local dev plus the configured frontend
allowed_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
]
frontend_url = settings.FRONTEND_URL
if frontend_url and frontend_url not in allowed_origins:
    allowed_origins.append(frontend_url)
    if not frontend_url.startswith("https"):
        allowed_origins.append(frontend_url.replace("http://", "https://"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "repuradar-api", "version": "1.0.0"}


@app.get("/")
def root():
    return {"message": "RepuRadar API", "version": "1.0.0", "docs": docs_url}


# Include routers
app.include_router(auth.router)
app.include_router(locations.router)
app.include_router(review_templates_api.router)
app.include_router(review_requests_api.router)
app.include_router(crm_integrations_api.router)
app.include_router(webhooks.router)
app.include_router(reviews.router)

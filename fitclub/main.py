from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import firebase_admin
from firebase_admin import credentials
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import os

from fitclub.config import settings
from fitclub.database import Base, get_engine, get_pool_status
from fitclub.logging_config import configure_logging
from fitclub.middleware.rate_limit import limiter
from fitclub.middleware.request_id import RequestIDMiddleware
from fitclub.routers import checkins, gamification, streaks
from fitclub.utils.logger import get_logger
import fitclub.models  # noqa: F401  registers tables on Base.metadata

# Configure logging first
configure_logging()
logger = get_logger(__name__)

# Initialize database tables
Base.metadata.create_all(bind=get_engine())

# Initialize Firebase Admin SDK with explicit credentials
firebase_app = None
try:
    firebase_json_path = settings.FIREBASE_SERVICE_ACCOUNT_JSON
    if os.path.exists(firebase_json_path):
        cred = credentials.Certificate(firebase_json_path)
        firebase_app = firebase_admin.initialize_app(cred)
        logger.info("Initialized Firebase Admin with provided service account JSON")
    else:
        # Bearer tokens cannot be verified; only X-User-ID authentication works
        logger.warning(f"FIREBASE_SERVICE_ACCOUNT_JSON not found at {firebase_json_path}. Firebase token auth is disabled.")
except Exception as e:
    logger.exception(f"Failed to initialize Firebase Admin SDK: {e}")
    raise

# Conditional docs configuration
if settings.DEBUG:
    docs_config = {
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "openapi_url": "/openapi.json"
    }
    logger.info("DEBUG mode: Swagger docs enabled at /docs")
else:
    docs_config = {
        "docs_url": None,
        "redoc_url": None,
        "openapi_url": None
    }
    logger.info("Production mode: Swagger docs disabled")

app = FastAPI(
    title="FitClub API",
    description="Gym check-in, streak and gamification backend for FitClub",
    version="1.0.0",
    **docs_config
)

# Set up rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

logger.info(f"CORS_ORIGINS: {settings.CORS_ORIGINS}")

# Add Request ID middleware first for proper request tracing
app.add_middleware(RequestIDMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(checkins.router)
app.include_router(gamification.router)
app.include_router(streaks.router)

@app.on_event("startup")
async def startup_event():
    """Log application startup information."""
    if settings.DEBUG:
        logger.info("FitClub API started in DEBUG mode - Docs available at /docs")
    else:
        logger.info("FitClub API started in PRODUCTION mode - Docs disabled")
    logger.info(f"Calendar days are counted in time zone {settings.GYM_TIMEZONE}")

@app.get("/")
async def root():
    return {"message": "FitClub API", "version": "1.0.0"}

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "healthy", "service": "fitclub-api", "database_pool": get_pool_status()}

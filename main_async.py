import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

# Refuses to start when a required environment variable is missing
from core.config import get_settings

settings = get_settings()

# ==== Logging ====
logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)

from core.errors import register_exception_handlers
from database.mongo import db, ensure_indexes
from routes import admin_route, comment_route, recipe_route
from routes.auth_route import auth_router
from utils.cloudinary_helper import configure_cloudinary
from utils.image_cleanup import cleanup_orphaned_images

# ==== Init Cloudinary ====
configure_cloudinary(settings)

# ==== FastAPI app ====
app = FastAPI(title="RecipeHub API", version="1.0.0")
register_exception_handlers(app, debug=settings.debug)

app.include_router(auth_router)
app.include_router(recipe_route.router, prefix="/recipes", tags=["Recipes"])
app.include_router(comment_route.router, prefix="/recipes")
app.include_router(admin_route.router, prefix="/admin", tags=["Admin"])

# Dynamic CORS based on environment
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5000",
    "http://localhost:8000",
]

if settings.frontend_url:
    ALLOWED_ORIGINS.append(settings.frontend_url.rstrip("/"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==== Logging middleware ====
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"Response: {response.status_code}")
    return response


# ==== Health Check Endpoints ====
@app.api_route("/", methods=["GET", "HEAD"])
async def root():
    return {"message": "Welcome to RecipeHub!"}


@app.api_route("/health", methods=["GET", "HEAD"])
async def health_check():
    try:
        await db.command("ping")
        mongo_status = "connected"
    except Exception as e:
        mongo_status = f"error: {e}" if settings.debug else "error"

    return {
        "status": "ok",
        "services": {"api": "running", "mongodb": mongo_status},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ==== Background Scheduler ====
scheduler = AsyncIOScheduler()


@app.on_event("startup")
async def startup_event():
    await ensure_indexes()

    if settings.enable_scheduler and not scheduler.running:
        scheduler.add_job(
            cleanup_orphaned_images,
            CronTrigger(hour=3, minute=0),  # 3:00 AM every day
            id="cleanup_orphaned_images",
            name="Destroy recipe images no recipe references",
            replace_existing=True,
        )
        scheduler.start()
        logger.info("✅ Background scheduler started - Daily image reconciliation at 3:00 AM")

    logger.info("🚀 RecipeHub API initialized")


@app.on_event("shutdown")
async def shutdown_event():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("🛑 Background scheduler stopped")

from datetime import datetime, timezone

from fastapi import FastAPI

from app.connections import mongo_lifespan
from app.api.user import router as user_router
from app.utils.config import settings
from app.utils.logging import setup_logging


setup_logging(settings.log_level)

app = FastAPI(title="Property App Users (Mongo)", version="0.1.0", lifespan=mongo_lifespan)


app.include_router(user_router, prefix="/api/users")


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "timestamp": datetime.now(timezone.utc),
    }

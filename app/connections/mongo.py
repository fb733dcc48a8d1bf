import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import certifi
from fastapi import FastAPI
from mongoengine import connect, disconnect

from app.models.user import User
from app.utils.config import settings


logger = logging.getLogger(__name__)


def connection_kwargs() -> dict[str, Any]:
    kwargs: dict[str, Any] = {"host": settings.mongo_uri, "alias": "default", "tz_aware": True}
    # pymongo turns TLS on whenever a CA file is given
    if settings.mongo_use_tls:
        kwargs["tlsCAFile"] = certifi.where()
    return kwargs


def init_mongo() -> None:
    connect(**connection_kwargs())
    User.ensure_indexes()
    logger.info("Connected to MongoDB database %s", settings.mongo_db)


def close_mongo() -> None:
    disconnect(alias="default")
    logger.info("Disconnected from MongoDB")


@asynccontextmanager
async def mongo_lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_mongo()
    try:
        yield
    finally:
        close_mongo()

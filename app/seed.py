from __future__ import annotations

import logging
import os

from app.connections.mongo import init_mongo, close_mongo
from app.models.user import User
from app.services.users import create_user, get_user_by_email
from app.utils.base import UserRole
from app.utils.config import settings
from app.utils.logging import setup_logging


logger = logging.getLogger(__name__)


def _fixtures() -> list[dict]:
    return [
        {
            "first_name": "Site",
            "last_name": "Admin",
            "email": os.getenv("ADMIN_EMAIL", "admin@example.com"),
            "password": os.getenv("ADMIN_PASSWORD", "ChangeMe123!"),
            "role": UserRole.ADMIN.value,
            "is_verified": True,
        },
        {
            "first_name": "Carol",
            "last_name": "Creator",
            "email": "carol@example.com",
            "password": "Secret123!",
            "role": UserRole.CONTENT_CREATOR.value,
            "is_verified": True,
        },
        {"first_name": "Alice", "email": "alice@example.com", "password": "Secret123!", "phone_number": "0801234567"},
        {"first_name": "Bob", "email": "bob@example.com", "password": "Secret123!"},
    ]


def ensure_users() -> list[User]:
    users: list[User] = []
    for fields in _fixtures():
        user = get_user_by_email(fields["email"])
        if not user:
            user = create_user(**fields)
        else:
            logger.info("User %s already exists, skipping", user.email)
        users.append(user)
    return users


def main() -> None:
    setup_logging(settings.log_level)
    init_mongo()
    try:
        ensure_users()
    finally:
        close_mongo()


if __name__ == "__main__":
    main()

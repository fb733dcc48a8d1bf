import logging
from datetime import datetime, timezone

from bson import ObjectId
from bson.errors import InvalidId
from fastapi.concurrency import run_in_threadpool
from mongoengine import NotUniqueError, ValidationError

from app.models.user import User


logger = logging.getLogger(__name__)


class DuplicateEmailError(ValidationError):
    """Another account already uses this email."""


def save_user(user: User) -> User:
    """Persist ``user``. ``User.save`` hashes a modified password first.

    A taken email surfaces as ``DuplicateEmailError``.
    """
    try:
        user.save()
    except NotUniqueError as exc:
        logger.info("Rejected duplicate email %s", user.email)
        raise DuplicateEmailError(f"Email {user.email} is already registered") from exc
    return user


def create_user(**fields) -> User:
    user = save_user(User(**fields))
    logger.info("Created user %s with role %s", user.pk, user.role)
    return user


async def asave_user(user: User) -> User:
    """``save_user`` for async callers; hashing and the write run in the threadpool."""
    return await run_in_threadpool(save_user, user)


async def acreate_user(**fields) -> User:
    return await run_in_threadpool(create_user, **fields)


def get_user(user_id, include_password: bool = False) -> User | None:
    try:
        object_id = ObjectId(str(user_id))
    except InvalidId:
        return None
    queryset = User.with_password if include_password else User.objects
    return queryset(id=object_id).first()


def get_user_by_email(email: str, include_password: bool = False) -> User | None:
    queryset = User.with_password if include_password else User.objects
    return queryset(email=email.strip().lower()).first()


def _property_id(property_id) -> ObjectId:
    try:
        return ObjectId(str(property_id))
    except InvalidId as exc:
        raise ValidationError(f"{property_id} is not a valid property id") from exc


def add_favourite(user: User, property_id) -> User:
    """Add a Property reference. Adding one already present is a no-op."""
    User.objects(id=user.pk).update_one(
        add_to_set__favourites=_property_id(property_id),
        set__updated_at=datetime.now(timezone.utc),
    )
    user.reload("favourites", "updated_at")
    return user


def remove_favourite(user: User, property_id) -> User:
    User.objects(id=user.pk).update_one(
        pull__favourites=_property_id(property_id),
        set__updated_at=datetime.now(timezone.utc),
    )
    user.reload("favourites", "updated_at")
    return user


def delete_user(user_id) -> bool:
    user = get_user(user_id)
    if user is None:
        return False
    user.delete()
    logger.info("Deleted user %s", user_id)
    return True

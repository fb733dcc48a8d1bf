from enum import Enum


class BaseEnum(Enum):
    @classmethod
    def values(cls):
        return [item.value for item in cls]


class UserRole(BaseEnum):
    ADMIN = "admin"
    CONTENT_CREATOR = "content creator"
    USER = "user"

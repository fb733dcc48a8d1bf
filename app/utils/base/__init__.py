from app.utils.base.enums import BaseEnum, UserRole

__all__ = ["BaseEnum", "UserRole"]

from app.utils.config.env import Settings, parse_duration, settings

__all__ = ["Settings", "parse_duration", "settings"]

import re
from datetime import timedelta

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DURATION_RE = re.compile(r"^\s*(\d*\.?\d+)\s*([a-z]*)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "ms": 0.001, "msec": 0.001, "msecs": 0.001, "millisecond": 0.001, "milliseconds": 0.001,
    "": 1, "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "h": 3600, "hr": 3600, "hrs": 3600, "hour": 3600, "hours": 3600,
    "d": 86400, "day": 86400, "days": 86400,
    "w": 604800, "week": 604800, "weeks": 604800,
    "y": 31557600, "yr": 31557600, "yrs": 31557600, "year": 31557600, "years": 31557600,
}


def parse_duration(value):
    """Parse durations such as ``30m``, ``12h``, ``7d``, ``1y``, ``2 days`` or ``1.5h``.

    A bare number is read as seconds; a year is 365.25 days. Strings that do
    not look like ``<number><unit>`` are returned untouched so pydantic can
    handle ISO 8601 durations. An unknown unit is an error.
    """
    if isinstance(value, str):
        match = _DURATION_RE.match(value)
        if match:
            amount, unit = match.groups()
            seconds = _DURATION_UNITS.get(unit.lower())
            if seconds is None:
                raise ValueError(f"Unknown duration unit {unit!r} in {value!r}")
            return timedelta(seconds=float(amount) * seconds)
    return value


class Settings(BaseSettings):
    app_name: str = "property-users"
    environment: str = "local"
    debug: bool = True
    log_level: str = "INFO"

    mongo_scheme: str = "mongodb+srv"
    mongo_port: int = 27017
    mongo_host: str = "localhost"
    mongo_db: str = "property_app"
    mongo_password: str | None = None
    mongo_params: str | None = None
    mongo_user: str | None = None
    # None: TLS for mongodb+srv only
    mongo_tls: bool | None = None

    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    jwt_expire: timedelta = timedelta(days=1)

    model_config = SettingsConfigDict(env_file=(".env",), case_sensitive=False, extra="ignore")

    @field_validator("jwt_expire", mode="before")
    @classmethod
    def _parse_jwt_expire(cls, value):
        return parse_duration(value)

    @property
    def mongo_uri(self) -> str:
        auth = ""
        if self.mongo_user and self.mongo_password:
            auth = f"{self.mongo_user}:{self.mongo_password}@"
        if self.mongo_scheme == "mongodb+srv":
            host = self.mongo_host
        else:
            host = f"{self.mongo_host}:{self.mongo_port}"
        params = self.mongo_params or "retryWrites=true&w=majority"
        return f"{self.mongo_scheme}://{auth}{host}/{self.mongo_db}?{params}"

    @property
    def mongo_use_tls(self) -> bool:
        if self.mongo_tls is not None:
            return self.mongo_tls
        return self.mongo_scheme == "mongodb+srv"


settings = Settings()

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ConfigError

MATCH_POLICIES = ("first-fit", "jaccard")


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_int(name: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {number}")
    return number


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    client_urls: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"
    socketio_logger: bool = False
    ban_threshold: int = 3
    max_file_bytes: int = 5 * 1024 * 1024
    match_policy: str = "first-fit"

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        """
        Builds settings from environment variables, falling back to defaults.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        settings.host = env.get("HOST", settings.host)
        if "PORT" in env:
            settings.port = _as_int("PORT", env["PORT"])

        origins = env.get("CLIENT_URL")
        if origins:
            settings.client_urls = [o.strip() for o in origins.split(",") if o.strip()]

        settings.log_level = env.get("LOG_LEVEL", settings.log_level).upper()
        settings.socketio_logger = _as_bool(env.get("SOCKETIO_LOGGER", "false"))

        if "BAN_THRESHOLD" in env:
            settings.ban_threshold = _as_int("BAN_THRESHOLD", env["BAN_THRESHOLD"])
        if "MAX_FILE_BYTES" in env:
            settings.max_file_bytes = _as_int("MAX_FILE_BYTES", env["MAX_FILE_BYTES"])

        policy = env.get("MATCH_POLICY", settings.match_policy).strip().lower()
        if policy not in MATCH_POLICIES:
            raise ConfigError(f"MATCH_POLICY must be one of {MATCH_POLICIES}, got {policy!r}")
        settings.match_policy = policy

        return settings

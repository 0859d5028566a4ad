"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_METERS_PER_FLOOR = 4.0
DEFAULT_DATA_FILE = "data/campus.json"


def load_local_env(candidates: list[Path] | None = None) -> None:
    """Load key=value pairs from local .env files if present.

    Variables already set in the environment are never overridden; the first
    file that defines an unset key wins.
    """
    for env_path in candidates or [Path("campusnav/.env"), Path(".env")]:
        if not env_path.exists():
            continue

        for raw in env_path.read_text(encoding="utf-8").splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            if not key or key in os.environ:
                continue
            os.environ[key] = value.strip().strip("'").strip('"')


@dataclass(slots=True)
class Settings:
    """Navigation service configuration."""

    meters_per_floor: float = DEFAULT_METERS_PER_FLOOR
    data_file: Path = Path(DEFAULT_DATA_FILE)
    log_level: str = "INFO"
    cors_origins: str = "*"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    def __post_init__(self) -> None:
        if self.meters_per_floor <= 0:
            raise ValueError("meters_per_floor must be > 0")

    @classmethod
    def from_env(cls) -> "Settings":
        try:
            meters_per_floor = float(os.getenv("CAMPUSNAV_METERS_PER_FLOOR", str(DEFAULT_METERS_PER_FLOOR)))
            api_port = int(os.getenv("API_PORT", "8000"))
        except ValueError as exc:
            raise ValueError(f"Invalid numeric setting: {exc}") from exc

        return cls(
            meters_per_floor=meters_per_floor,
            data_file=Path(os.getenv("CAMPUSNAV_DATA_FILE", DEFAULT_DATA_FILE)),
            log_level=os.getenv("CAMPUSNAV_LOG_LEVEL", "INFO").upper(),
            cors_origins=os.getenv("CAMPUSNAV_CORS_ORIGINS", "*").strip(),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=api_port,
            api_reload=os.getenv("API_RELOAD", "false").lower() == "true",
        )

    def cors_origin_list(self) -> tuple[list[str], bool]:
        """Return ``(origins, allow_credentials)`` for the CORS middleware."""
        if self.cors_origins == "*":
            return ["*"], False
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()], True

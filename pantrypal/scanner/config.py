"""TOML configuration loader for the scanner module."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class CameraConfig:
    indices: list[int] = field(default_factory=lambda: [0])
    save_dir: str = "/tmp/pantrypal"


@dataclass
class GeminiVisionConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class ClaudeVisionConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class VisionConfig:
    backend: str = "gemini"
    min_confidence: float = 0.3
    timeout: float = 30.0
    gemini: GeminiVisionConfig = field(default_factory=GeminiVisionConfig)
    claude: ClaudeVisionConfig = field(default_factory=ClaudeVisionConfig)

    @property
    def system_api_key(self) -> str:
        """The system-wide default key for the selected backend."""
        match self.backend:
            case "gemini":
                return self.gemini.api_key
            case "claude":
                return self.claude.api_key
            case _:
                return ""


@dataclass
class DatabaseConfig:
    path: str = "~/.config/pantrypal/pantry.db"


@dataclass
class HouseholdConfig:
    currency: str = "USD"


@dataclass
class SecretsConfig:
    key: str = ""


@dataclass
class SchedulerConfig:
    expiry_schedule: str = "0 0 * * *"
    expiring_soon_days: int = 3


@dataclass
class ScannerConfig:
    camera: CameraConfig = field(default_factory=CameraConfig)
    vision: VisionConfig = field(default_factory=VisionConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    household: HouseholdConfig = field(default_factory=HouseholdConfig)
    secrets: SecretsConfig = field(default_factory=SecretsConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)


def load_config(path: str | Path | None = None) -> ScannerConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys and the secrets key can be supplied via environment variables;
    a missing key is a valid state, not an error.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cam = raw.get("camera", {})
    vis = raw.get("vision", {})
    dbs = raw.get("database", {})
    hh = raw.get("household", {})
    sec = raw.get("secrets", {})
    sch = raw.get("scheduler", {})

    gemini_cfg = vis.get("gemini", {})
    claude_cfg = vis.get("claude", {})

    # Resolve keys: config file → environment variable
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    secrets_key = sec.get("key", "") or os.environ.get("PANTRYPAL_SECRET_KEY", "")

    min_confidence = float(vis.get("min_confidence", 0.3))
    if not 0.0 <= min_confidence <= 1.0:
        raise ValueError(
            f"vision.min_confidence must be within [0, 1], got {min_confidence}"
        )

    return ScannerConfig(
        camera=CameraConfig(
            indices=cam.get("indices", [0]),
            save_dir=cam.get("save_dir", "/tmp/pantrypal"),
        ),
        vision=VisionConfig(
            backend=vis.get("backend", "gemini"),
            min_confidence=min_confidence,
            timeout=float(vis.get("timeout", 30.0)),
            gemini=GeminiVisionConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
            claude=ClaudeVisionConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
        ),
        database=DatabaseConfig(
            path=dbs.get("path", "~/.config/pantrypal/pantry.db"),
        ),
        household=HouseholdConfig(
            currency=hh.get("currency", "USD"),
        ),
        secrets=SecretsConfig(key=secrets_key),
        scheduler=SchedulerConfig(
            expiry_schedule=sch.get("expiry_schedule", "0 0 * * *"),
            expiring_soon_days=sch.get("expiring_soon_days", 3),
        ),
    )

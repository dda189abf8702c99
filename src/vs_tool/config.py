"""Environment-derived settings"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

DEFAULT_METADATA_URL = "https://www.coreweave.com/cloud/api/v1/metadata/instances"
DEFAULT_REGIONS = "ORD1,EWR1"
DEFAULT_CACHE_TTL_SECONDS = 10 * 60

# Storage is billed per GB-hour regardless of instance type
STORAGE_BILLING_RATE = 0.000097

MAX_PORTS = 10
MAX_PORT = 65536


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


def _default_cache_dir() -> Path:
    return Path(os.path.realpath(tempfile.gettempdir())) / "vs-tool.cache"


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read from VS_TOOL_* environment variables"""

    cache_dir: Path = field(default_factory=_default_cache_dir)
    cache_ttl: timedelta = timedelta(seconds=DEFAULT_CACHE_TTL_SECONDS)
    metadata_url: str = DEFAULT_METADATA_URL
    image_namespace: str = "vd-images"
    definition_namespace: str = "virtual-server"
    regions: tuple[str, ...] = tuple(DEFAULT_REGIONS.split(","))
    debug: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        cache_dir = os.getenv("VS_TOOL_CACHE_DIR")
        regions = os.getenv("VS_TOOL_REGIONS", DEFAULT_REGIONS)
        return cls(
            cache_dir=Path(cache_dir).expanduser() if cache_dir else _default_cache_dir(),
            cache_ttl=timedelta(
                seconds=int(os.getenv("VS_TOOL_CACHE_TTL", str(DEFAULT_CACHE_TTL_SECONDS)))
            ),
            metadata_url=os.getenv("VS_TOOL_METADATA_URL", DEFAULT_METADATA_URL),
            image_namespace=os.getenv("VS_TOOL_IMAGE_NAMESPACE", "vd-images"),
            definition_namespace=os.getenv("VS_TOOL_DEFINITION_NAMESPACE", "virtual-server"),
            regions=tuple(r.strip() for r in regions.split(",") if r.strip()),
            debug=_env_flag("DEBUG"),
        )

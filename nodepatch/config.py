import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_MAX_PATCHES = 10
DEFAULT_MAX_PATCH_BYTES = 1024

# Load .env if present (local dev). Exported env vars take precedence.
load_dotenv(override=False)


@dataclass(frozen=True)
class PatchLimits:
    max_patches: int = DEFAULT_MAX_PATCHES
    max_patch_bytes: int = DEFAULT_MAX_PATCH_BYTES


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


def get_patch_limits() -> PatchLimits:
    return PatchLimits(
        max_patches=_env_int("NODEPATCH_MAX_PATCHES", DEFAULT_MAX_PATCHES),
        max_patch_bytes=_env_int("NODEPATCH_MAX_PATCH_BYTES", DEFAULT_MAX_PATCH_BYTES),
    )


def get_log_level() -> str:
    return os.getenv("NODEPATCH_LOG_LEVEL", "INFO").strip().upper() or "INFO"

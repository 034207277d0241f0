"""
changelog-kit — Configuration
Loads .env automatically, then reads all settings from environment variables.
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from changelog_kit.models.results import DEDUP_KEYS, MERGE_STRATEGIES

_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(_env_path)


@dataclass(frozen=True)
class MergeDefaults:
    """Defaults applied when a merge request leaves an option out."""
    strategy: str
    deduplicate: bool
    deduplicate_key: str
    preserve_package_prefix: bool


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""
    host: str
    port: int
    debug: bool
    log_level: str
    merge: MergeDefaults
    version_prefix: str
    max_source_bytes: int


def _load_config() -> AppConfig:
    return AppConfig(
        host=os.getenv("CHANGELOG_KIT_HOST", "0.0.0.0"),
        port=int(os.getenv("CHANGELOG_KIT_PORT", "8000")),
        debug=os.getenv("CHANGELOG_KIT_DEBUG", "false").lower() == "true",
        log_level=os.getenv("CHANGELOG_KIT_LOG_LEVEL", "INFO").upper(),
        merge=MergeDefaults(
            strategy=os.getenv("CHANGELOG_KIT_MERGE_STRATEGY", "by-date"),
            deduplicate=os.getenv("CHANGELOG_KIT_DEDUPLICATE", "true").lower() == "true",
            deduplicate_key=os.getenv("CHANGELOG_KIT_DEDUP_KEY", "hash"),
            preserve_package_prefix=(
                os.getenv("CHANGELOG_KIT_PRESERVE_PACKAGE_PREFIX", "false").lower() == "true"
            ),
        ),
        version_prefix=os.getenv("CHANGELOG_KIT_VERSION_PREFIX", ""),
        max_source_bytes=int(os.getenv("CHANGELOG_KIT_MAX_SOURCE_BYTES", str(5 * 1024 * 1024))),
    )


def _validate_config(cfg: AppConfig) -> None:
    """Fail fast on merge defaults that no merge could honour."""
    problems: list[str] = []
    if cfg.merge.strategy not in MERGE_STRATEGIES:
        problems.append(f"CHANGELOG_KIT_MERGE_STRATEGY={cfg.merge.strategy!r}")
    if cfg.merge.deduplicate_key not in DEDUP_KEYS:
        problems.append(f"CHANGELOG_KIT_DEDUP_KEY={cfg.merge.deduplicate_key!r}")
    if cfg.max_source_bytes <= 0:
        problems.append(f"CHANGELOG_KIT_MAX_SOURCE_BYTES={cfg.max_source_bytes}")
    if problems:
        print(
            f"\n  ERROR: Invalid changelog-kit settings: {', '.join(problems)}\n"
            f"  Strategies: {', '.join(MERGE_STRATEGIES)}\n"
            f"  Dedup keys: {', '.join(DEDUP_KEYS)}\n",
            file=sys.stderr,
        )
        sys.exit(1)


settings = _load_config()
_validate_config(settings)

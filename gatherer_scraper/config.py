"""YAML configuration loader and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gatherer_scraper.models import RunPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class CatalogConfig:
    """Where the card catalog lives and how politely to fetch from it."""

    base_url: str = "http://gatherer.wizards.com"
    user_agent: str = "Gatherer-Scraper/0.3"
    timeout: float = 30.0
    rate_limit_ms: int = 0
    max_retries: int = 3
    backoff_base: float = 1.0  # seconds; backoff doubles: 1, 2, 4

    @property
    def landing_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/Pages/Default.aspx"


@dataclass
class OutputConfig:
    """Output directory and file names."""

    directory: str = "./output/"
    sets_file: str = "sets.sql"

    @property
    def sets_path(self) -> Path:
        return Path(self.directory) / self.sets_file


@dataclass
class PolicyConfig:
    """Default file-collision behaviour."""

    force: bool = False
    skip: bool = False


@dataclass
class AppConfig:
    """Top-level application configuration."""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)

    def run_policy(self, pretend: bool = False) -> RunPolicy:
        """Build the mutable policy object for one run."""
        return RunPolicy(
            force=self.policy.force,
            skip=self.policy.skip,
            pretend=pretend,
        )


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        config = AppConfig()
    else:
        logger.info("Loading config from %s", config_path)
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        config = _parse_config(raw) if raw else AppConfig()

    validate_config(config)
    return config


def _parse_config(raw: Dict[str, Any]) -> AppConfig:
    """Parse raw YAML dict into AppConfig."""
    config = AppConfig()

    if "catalog" in raw:
        cat = raw["catalog"] or {}
        config.catalog = CatalogConfig(
            base_url=str(cat.get("base_url", config.catalog.base_url)),
            user_agent=str(cat.get("user_agent", config.catalog.user_agent)),
            timeout=float(cat.get("timeout", config.catalog.timeout)),
            rate_limit_ms=int(cat.get("rate_limit_ms", config.catalog.rate_limit_ms)),
            max_retries=int(cat.get("max_retries", config.catalog.max_retries)),
            backoff_base=float(cat.get("backoff_base", config.catalog.backoff_base)),
        )

    if "output" in raw:
        out = raw["output"] or {}
        config.output = OutputConfig(
            directory=str(out.get("directory", config.output.directory)),
            sets_file=str(out.get("sets_file", config.output.sets_file)),
        )

    if "policy" in raw:
        pol = raw["policy"] or {}
        config.policy = PolicyConfig(
            force=bool(pol.get("force", False)),
            skip=bool(pol.get("skip", False)),
        )

    return config


def validate_config(config: AppConfig) -> None:
    """Validate config and raise on errors."""
    catalog = config.catalog
    if not catalog.base_url.strip():
        raise ValueError("Config error: catalog.base_url must not be empty")
    if catalog.timeout <= 0:
        raise ValueError(f"Config error: catalog.timeout must be positive, got {catalog.timeout}")
    if catalog.rate_limit_ms < 0:
        raise ValueError(
            f"Config error: catalog.rate_limit_ms must not be negative, got {catalog.rate_limit_ms}"
        )
    if catalog.max_retries < 1:
        raise ValueError(
            f"Config error: catalog.max_retries must be at least 1, got {catalog.max_retries}"
        )
    if config.policy.force and config.policy.skip:
        raise ValueError("Config error: policy.force and policy.skip are mutually exclusive")

    logger.debug(
        "Config validated: catalog=%s, output -> %s",
        catalog.base_url,
        config.output.directory,
    )

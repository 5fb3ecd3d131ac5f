"""Configuration file loading."""

import json
import logging
import os
from dataclasses import fields
from datetime import timedelta
from pathlib import Path

from gpx_wind.models import AnalysisParams

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "gpx-wind"
CONFIG_PATH = CONFIG_DIR / "gpx-wind.json"
LOCAL_CONFIG_PATH = Path("gpx-wind.json")

ARCHIVE_URL_ENV = "GPX_WIND_ARCHIVE_URL"


def load_config() -> dict:
    """Load configuration from config files.

    Merges config from global and local files:
    1. ~/.config/gpx-wind/gpx-wind.json (global, loaded first)
    2. ./gpx-wind.json (local, overrides global)

    Returns:
        Dict with merged config values, empty dict if no files exist.
    """
    config = {}
    for config_path in [CONFIG_PATH, LOCAL_CONFIG_PATH]:
        if config_path.exists():
            try:
                with config_path.open() as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("Ignoring unreadable config file %s: %s", config_path, e)
                continue
    return config


def params_from_config(config: dict | None = None) -> AnalysisParams:
    """Build AnalysisParams from config values.

    Keys match AnalysisParams field names, except the sampling interval which
    is given in minutes as "wind_interval_minutes". Unknown keys are ignored.
    The archive URL falls back to the GPX_WIND_ARCHIVE_URL environment variable.
    """
    if config is None:
        config = {}

    names = {f.name for f in fields(AnalysisParams)} - {"wind_interval"}
    kwargs = {name: config[name] for name in names if name in config}

    if "wind_interval_minutes" in config:
        kwargs["wind_interval"] = timedelta(minutes=float(config["wind_interval_minutes"]))
    if "archive_url" not in kwargs and os.environ.get(ARCHIVE_URL_ENV):
        kwargs["archive_url"] = os.environ[ARCHIVE_URL_ENV]

    return AnalysisParams(**kwargs)

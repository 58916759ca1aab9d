"""
Initializes the Dynaconf settings object for the pouet_sync component.
This module is the single source of truth for all configuration.
"""

from pathlib import Path
from dynaconf import Dynaconf, Validator

PROJECT_ROOT = Path(__file__).parent.parent

settings = Dynaconf(
    root_path=PROJECT_ROOT,
    settings_files=["config/settings.toml"],
    secrets=["config/.secrets.toml"],
    envvar_prefix="POUET",
    validators=[
        Validator("logging.level", default="INFO"),
        Validator(
            "pouet.manifest_url", default="https://data.pouet.net/json.php"
        ),
        Validator("pouet.timeout", default=60, gt=0),
        Validator("pouet.cache", default=True, is_type_of=bool),
        Validator("pouet.database", default="pouet.db"),
        Validator("paths.snapshot_dir", default="."),
    ],
)

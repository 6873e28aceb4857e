"""Typed configuration for coilvision.

All configuration is expressed as a Pydantic model with sensible defaults.
Typos in field names cause immediate validation errors instead of silent
failures.  Values come from (highest priority first) explicit overrides,
a YAML file, and ``CUSTOMVISION_*`` environment variables (a ``.env`` file
in the working directory is honoured).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from coilvision.errors import ConfigurationError
from coilvision.models.labels import COIL100_LABELS, LabelMap

logger = logging.getLogger("coilvision")

# Environment variable -> config field
ENV_VARS: dict[str, str] = {
    "CUSTOMVISION_ENDPOINT": "endpoint",
    "CUSTOMVISION_KEY": "training_key",
    "CUSTOMVISION_PREDICTION_KEY": "prediction_key",
    "CUSTOMVISION_RESOURCE_ID": "resource_id",
    "CUSTOMVISION_PROJECT": "project_name",
}


class CustomVisionConfig(BaseModel):
    """Connection and workflow settings."""
    model_config = ConfigDict(extra="forbid")

    endpoint: str = ""
    training_key: SecretStr = SecretStr("")
    prediction_key: SecretStr | None = None
    resource_id: str = ""

    project_name: str = "COIL100 Small"
    publish_name: str = "coil100Model"

    # Filesystem layout (relative to the working directory)
    images_dir: str | None = None      # None = first of "images" / "Images"
    test_dir: str = "Test"
    output_dir: str = "."

    # Status polling
    poll_interval: float = Field(default=1.0, ge=0)
    max_polls: int | None = Field(default=None, ge=1)

    timeout: int = 30

    # Label id -> tag name override; empty = the built-in COIL-100 table
    labels: dict[int, str] = Field(default_factory=dict)

    @field_validator("endpoint", "resource_id", "project_name", "publish_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @property
    def label_map(self) -> LabelMap:
        return LabelMap.from_dict(self.labels) if self.labels else COIL100_LABELS

    @property
    def prediction_key_value(self) -> str:
        """Prediction key, falling back to the training key."""
        if self.prediction_key is not None and self.prediction_key.get_secret_value():
            return self.prediction_key.get_secret_value()
        return self.training_key.get_secret_value()

    def validate_required(self) -> "CustomVisionConfig":
        """Raise :class:`ConfigurationError` if any required value is blank."""
        missing = []
        if not self.endpoint:
            missing.append("endpoint")
        if not self.training_key.get_secret_value().strip():
            missing.append("training_key")
        if not self.resource_id:
            missing.append("resource_id")
        if missing:
            raise ConfigurationError(missing)
        return self


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    *,
    use_env: bool = True,
) -> CustomVisionConfig:
    """Build a :class:`CustomVisionConfig` from env, YAML and overrides.

    ``None`` values in *overrides* are ignored so argparse defaults do not
    mask values from the file or the environment.
    """
    raw: dict[str, Any] = {}

    if use_env:
        from dotenv import find_dotenv, load_dotenv

        load_dotenv(find_dotenv(usecwd=True))
        for var, key in ENV_VARS.items():
            val = os.environ.get(var)
            if val:
                raw[key] = val

    if path is not None:
        import yaml

        logger.debug("Loading config from %s", path)
        with open(path) as fh:
            file_data = yaml.safe_load(fh) or {}
        if not isinstance(file_data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        raw.update(file_data)

    if overrides:
        raw.update({k: v for k, v in overrides.items() if v is not None})

    return CustomVisionConfig.model_validate(raw)

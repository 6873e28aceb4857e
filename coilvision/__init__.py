"""coilvision -- drive an Azure Custom Vision classifier for COIL-100.

Tags, uploads labelled images, trains, publishes, predicts and exports.
"""

__version__ = "1.0.0"
VERSION = __version__

from coilvision.client import CustomVisionClient
from coilvision.errors import (
    CoilVisionError,
    ConfigurationError,
    CustomVisionError,
    NoIterationError,
    ProjectNotFoundError,
    UnrecognizedImageError,
)
from coilvision.models.config import CustomVisionConfig, load_config
from coilvision.models.labels import COIL100_LABELS, Label, LabelMap, resolve_label

__all__ = [
    "CustomVisionClient",
    "CustomVisionConfig",
    "load_config",
    "CoilVisionError",
    "ConfigurationError",
    "CustomVisionError",
    "NoIterationError",
    "ProjectNotFoundError",
    "UnrecognizedImageError",
    "COIL100_LABELS",
    "Label",
    "LabelMap",
    "resolve_label",
]

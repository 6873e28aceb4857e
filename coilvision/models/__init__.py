from coilvision.models.config import CustomVisionConfig, load_config
from coilvision.models.customvision import (
    Export,
    ImagePrediction,
    Iteration,
    Prediction,
    Project,
    Tag,
    UploadSummary,
)
from coilvision.models.labels import COIL100_LABELS, Label, LabelMap

__all__ = [
    "CustomVisionConfig",
    "load_config",
    "Export",
    "ImagePrediction",
    "Iteration",
    "Prediction",
    "Project",
    "Tag",
    "UploadSummary",
    "COIL100_LABELS",
    "Label",
    "LabelMap",
]

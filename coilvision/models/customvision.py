"""Custom Vision data models.

Typed representations of the service resources (projects, tags, iterations,
exports, predictions).  These are plain data objects - the HTTP interaction
lives in :mod:`coilvision.cv.api`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

# Iteration / export status values reported by the service
TRAINING = "Training"
COMPLETED = "Completed"
FAILED = "Failed"
EXPORTING = "Exporting"
DONE = "Done"


@dataclass
class Project:
    """A Custom Vision project."""
    id: str
    name: str = ""
    description: str = ""

    @classmethod
    def from_api_dict(cls, data: dict) -> "Project":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description") or "",
        )


@dataclass
class Tag:
    """A named label category inside a project."""
    id: str
    name: str
    image_count: int = 0

    @classmethod
    def from_api_dict(cls, data: dict) -> "Tag":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            image_count=int(data.get("imageCount") or 0),
        )


@dataclass
class Iteration:
    """One training run of the project's classifier."""
    id: str
    name: str = ""
    status: str = ""        # "Training", "Completed", "Failed"
    created: datetime | None = None
    trained_at: datetime | None = None
    publish_name: str | None = None
    exportable: bool = False

    @classmethod
    def from_api_dict(cls, data: dict) -> "Iteration":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            status=data.get("status", ""),
            created=_parse_dt(data.get("created")),
            trained_at=_parse_dt(data.get("trainedAt")),
            publish_name=data.get("publishName") or None,
            exportable=bool(data.get("exportable", False)),
        )


@dataclass
class Export:
    """A downloadable conversion of an iteration for one platform."""
    platform: str
    status: str = ""        # "Exporting", "Done", "Failed"
    download_uri: str | None = None
    flavor: str | None = None

    @classmethod
    def from_api_dict(cls, data: dict) -> "Export":
        return cls(
            platform=data.get("platform", ""),
            status=data.get("status", ""),
            download_uri=data.get("downloadUri") or None,
            flavor=data.get("flavor"),
        )


@dataclass
class Prediction:
    """One (tag, probability) pair returned by a classification."""
    tag_name: str
    probability: float
    tag_id: str = ""

    @classmethod
    def from_api_dict(cls, data: dict) -> "Prediction":
        return cls(
            tag_name=data.get("tagName", ""),
            probability=float(data.get("probability", 0.0)),
            tag_id=data.get("tagId", ""),
        )


@dataclass
class ImagePrediction:
    """Result of classifying a single image."""
    id: str = ""
    iteration: str = ""
    created: datetime | None = None
    predictions: list[Prediction] = field(default_factory=list)

    @classmethod
    def from_api_dict(cls, data: dict) -> "ImagePrediction":
        return cls(
            id=data.get("id", ""),
            iteration=data.get("iteration", ""),
            created=_parse_dt(data.get("created")),
            predictions=[Prediction.from_api_dict(p) for p in data.get("predictions", [])],
        )


@dataclass
class ImageUploadResult:
    """Per-image outcome of an upload call."""
    source_url: str = ""
    status: str = ""        # "OK", "OKDuplicate", "ErrorSource", ...
    image_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.status.startswith("OK")


@dataclass
class UploadSummary:
    """Response of ``POST projects/{id}/images``."""
    is_batch_successful: bool = False
    images: list[ImageUploadResult] = field(default_factory=list)

    @classmethod
    def from_api_dict(cls, data: dict | None) -> "UploadSummary":
        data = data or {}
        images = []
        for img in data.get("images", []):
            image = img.get("image") or {}
            images.append(ImageUploadResult(
                source_url=img.get("sourceUrl", ""),
                status=img.get("status", ""),
                image_id=image.get("id"),
            ))
        return cls(
            is_batch_successful=bool(data.get("isBatchSuccessful", False)),
            images=images,
        )


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------

_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def _parse_dt(val: str | None) -> datetime | None:
    if not val:
        return None
    # The service may send 7 fractional digits; strptime accepts at most 6.
    val = _FRACTION_RE.sub(r".\1", val)
    for fmt in ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S"):
        try:
            dt = datetime.strptime(val, fmt)
        except (ValueError, TypeError):
            continue
        return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    return None

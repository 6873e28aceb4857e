"""Local image discovery and per-image upload."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from coilvision.client import CustomVisionClient
from coilvision.models.customvision import Tag
from coilvision.models.labels import LabelMap, resolve_label
from coilvision.train.tags import TagSet

logger = logging.getLogger("coilvision.train")

IMAGES_DIR_NAMES = ("images", "Images")


@dataclass
class PendingUpload:
    path: Path
    tag: Tag


def list_images(directory: Path) -> list[Path]:
    """Regular, non-hidden files in *directory*, sorted by name."""
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Not a directory: {directory}")
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and not p.name.startswith(".")
    )


def find_images_dir(root: Path, names: Iterable[str] = IMAGES_DIR_NAMES) -> Path:
    """Return the first of ``images`` / ``Images`` that exists under *root*."""
    root = Path(root)
    for name in names:
        candidate = root / name
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(
        f"No images directory ({' or '.join(names)}) under {root}"
    )


def resolve_uploads(
    paths: Iterable[Path],
    label_map: LabelMap,
    tags: TagSet,
) -> list[PendingUpload]:
    """Pair every file with its tag.

    All names are resolved before anything is sent, so one bad filename
    aborts the batch with :class:`UnrecognizedImageError` up front.
    """
    pending = []
    for path in paths:
        label = resolve_label(path.name, label_map)
        pending.append(PendingUpload(path=path, tag=tags[label.name]))
    return pending


def upload_images(
    client: CustomVisionClient,
    project_id: str,
    uploads: list[PendingUpload],
) -> int:
    """Upload each image with its single tag.  Returns the number uploaded.

    One request per image; a failure leaves earlier uploads in place.
    """
    count = 0
    for item in uploads:
        with open(item.path, "rb") as fh:
            data = fh.read()
        summary = client.upload_image(project_id, data, [item.tag.id])
        if summary.images and not summary.images[0].ok:
            logger.warning("Image %s: service reported %s", item.path.name, summary.images[0].status)
        print(f"Image {item.path.name} uploaded")
        count += 1
    return count

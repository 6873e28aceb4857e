"""Classify every image of the test directory against the published model."""

from __future__ import annotations

import logging
from pathlib import Path

from coilvision.client import CustomVisionClient
from coilvision.errors import CustomVisionError
from coilvision.models.customvision import Prediction
from coilvision.train.upload import list_images

logger = logging.getLogger("coilvision.train")


def format_prediction(pred: Prediction) -> str:
    return f"For Tag {pred.tag_name}: \t{pred.probability * 100:.3f}%"


def predict_directory(
    client: CustomVisionClient,
    project_id: str,
    publish_name: str,
    test_dir: Path,
) -> dict[str, list[Prediction]]:
    """Return ``{filename: predictions}`` for each image in *test_dir*.

    A failed classification is logged and the image is left out.
    """
    print("Making predictions:")
    results: dict[str, list[Prediction]] = {}
    for path in list_images(test_dir):
        with open(path, "rb") as fh:
            data = fh.read()

        print(f"\t---------- Image {path.name} ----------")
        try:
            result = client.classify_image(project_id, publish_name, data)
        except CustomVisionError as exc:
            logger.error("Prediction for %s failed: %s", path.name, exc)
            continue

        for pred in result.predictions:
            print(format_prediction(pred))
        results[path.name] = result.predictions
    return results

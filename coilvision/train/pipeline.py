"""End-to-end run for ``python -m coilvision``."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from coilvision.client import CustomVisionClient
from coilvision.console import Interaction
from coilvision.models.config import CustomVisionConfig
from coilvision.models.customvision import Iteration, Prediction, Project
from coilvision.train.export import run_export_loop
from coilvision.train.predict import predict_directory
from coilvision.train.tags import TagSet, reconcile_tags
from coilvision.train.trainer import (
    TrainOutcome,
    ensure_published,
    latest_iteration,
    train_and_publish,
)
from coilvision.train.upload import (
    find_images_dir,
    list_images,
    resolve_uploads,
    upload_images,
)

logger = logging.getLogger("coilvision.train")


@dataclass
class PipelineResult:
    """Everything a run produced."""

    project: Project
    iteration: Iteration
    tags: TagSet
    uploaded: int = 0
    train_outcome: TrainOutcome | None = None
    predictions: dict[str, list[Prediction]] = field(default_factory=dict)
    exported: list[Path] = field(default_factory=list)


def run_pipeline(
    config: CustomVisionConfig,
    interaction: Interaction,
    *,
    client: CustomVisionClient | None = None,
    workdir: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    """Run the whole workflow.

    Steps: validate config → find project → tags → upload → train & publish
    → iteration fallback → predict → export.

    Parameters
    ----------
    config:
        Settings; required values are checked before any remote call.
    interaction:
        Source of the yes/no and menu answers.
    client:
        Pre-built client (tests); built from *config* when ``None``.
    workdir:
        Base for relative directories.  Defaults to the current directory.
    sleep:
        Used between status polls.
    """
    config.validate_required()
    base = Path(workdir) if workdir else Path.cwd()
    cv = client or CustomVisionClient(config=config)

    # --- 1. Project --------------------------------------------------------
    print("Selecting existing project:")
    project = cv.project(config.project_name)
    logger.info("Using project %r (%s)", project.name, project.id)

    # --- 2. Tags -----------------------------------------------------------
    label_map = config.label_map
    tags = reconcile_tags(cv, project.id, label_map)
    result = PipelineResult(project=project, iteration=Iteration(id=""), tags=tags)

    # --- 3. Upload ---------------------------------------------------------
    upload = True
    if tags.existing_image_count > 0:
        interaction.show(
            f"There are already {tags.existing_image_count} training images in the project."
        )
        upload = interaction.confirm("Do you want to upload more images?")

    if upload:
        images_dir = base / config.images_dir if config.images_dir else find_images_dir(base)
        pending = resolve_uploads(list_images(images_dir), label_map, tags)
        print("\tUploading images")
        result.uploaded = upload_images(cv, project.id, pending)

    # --- 4. Train & publish ------------------------------------------------
    iteration = None
    if result.uploaded:
        result.train_outcome = train_and_publish(
            cv, project.id, config.publish_name, config.resource_id,
            interval=config.poll_interval, max_polls=config.max_polls, sleep=sleep,
        )
        if result.train_outcome.published:
            iteration = result.train_outcome.iteration
        else:
            print(f"Training did not publish a new iteration: {result.train_outcome.message}")

    # --- 5. Fallback to the newest existing iteration ----------------------
    if iteration is None:
        iteration = latest_iteration(cv.iterations(project.id))
        print(f"Using existing iteration {iteration.name or iteration.id}")
        ensure_published(cv, project.id, iteration, config.publish_name, config.resource_id)
    result.iteration = iteration

    # --- 6. Predict --------------------------------------------------------
    result.predictions = predict_directory(
        cv, project.id, config.publish_name, base / config.test_dir,
    )

    # --- 7. Export ---------------------------------------------------------
    if interaction.confirm("Do you want to export the model?"):
        result.exported = run_export_loop(
            cv, project.id, iteration.id, config.publish_name,
            base / config.output_dir, interaction,
            interval=config.poll_interval, max_polls=config.max_polls, sleep=sleep,
        )

    return result

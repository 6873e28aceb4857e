"""Training, status polling, publishing and iteration fallback.

Training errors do not abort the run: :func:`train_and_publish` returns a
:class:`TrainOutcome` and the pipeline falls back to the newest existing
iteration via :func:`latest_iteration`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Protocol, TypeVar

from coilvision.client import CustomVisionClient
from coilvision.errors import CustomVisionError, NoIterationError, PollTimeoutError
from coilvision.models.customvision import COMPLETED, TRAINING, Iteration

logger = logging.getLogger("coilvision.train")

# Service code prefix for "nothing changed since the last iteration"
TRAINING_NOT_NEEDED = "BadRequestTrainingNotNeeded"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class _HasStatus(Protocol):
    status: str


T = TypeVar("T", bound=_HasStatus)


class TrainStatus(str, Enum):
    """How a train-and-publish attempt ended."""
    PUBLISHED = "published"
    NO_CHANGES = "no_changes"
    FAILED = "failed"


@dataclass
class TrainOutcome:
    """Result of :func:`train_and_publish`."""

    status: TrainStatus
    iteration: Iteration | None = None
    message: str = ""

    @property
    def published(self) -> bool:
        return self.status is TrainStatus.PUBLISHED


def poll_until(
    fetch: Callable[[], T],
    current: T,
    in_progress: str,
    *,
    interval: float = 1.0,
    max_polls: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
    on_status: Callable[[T], None] | None = None,
    what: str = "job",
) -> T:
    """Re-fetch *current* every *interval* seconds while its status is *in_progress*.

    Raises
    ------
    PollTimeoutError
        When *max_polls* fetches did not reach another status.
    """
    polls = 0
    while current.status == in_progress:
        if max_polls is not None and polls >= max_polls:
            raise PollTimeoutError(what, polls, current.status)
        sleep(interval)
        current = fetch()
        polls += 1
        if on_status is not None:
            on_status(current)
    logger.debug("%s left %r after %d polls (now %r)", what, in_progress, polls, current.status)
    return current


def _print_iteration_status(iteration: Iteration) -> None:
    print(f"Iteration status: {iteration.status}")


def train_and_publish(
    client: CustomVisionClient,
    project_id: str,
    publish_name: str,
    resource_id: str,
    *,
    interval: float = 1.0,
    max_polls: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> TrainOutcome:
    """Train a new iteration, wait for it, then publish it as *publish_name*."""
    print("\tTraining")
    try:
        iteration = client.train(project_id)
    except CustomVisionError as exc:
        if exc.code and exc.code.startswith(TRAINING_NOT_NEEDED):
            logger.info("Training skipped: %s", exc.message)
            return TrainOutcome(TrainStatus.NO_CHANGES, message=exc.message)
        logger.error("Training request failed: %s", exc)
        return TrainOutcome(TrainStatus.FAILED, message=str(exc))

    _print_iteration_status(iteration)
    try:
        iteration = poll_until(
            lambda: client.iteration(project_id, iteration.id),
            iteration,
            TRAINING,
            interval=interval,
            max_polls=max_polls,
            sleep=sleep,
            on_status=_print_iteration_status,
            what=f"Iteration {iteration.id}",
        )
    except (CustomVisionError, PollTimeoutError) as exc:
        logger.error("Waiting for iteration %s failed: %s", iteration.id, exc)
        return TrainOutcome(TrainStatus.FAILED, iteration, str(exc))

    if iteration.status != COMPLETED:
        msg = f"Iteration {iteration.id} ended with status {iteration.status!r}"
        logger.error(msg)
        return TrainOutcome(TrainStatus.FAILED, iteration, msg)

    try:
        client.publish_iteration(project_id, iteration.id, publish_name, resource_id)
    except CustomVisionError as exc:
        logger.error("Publishing iteration %s failed: %s", iteration.id, exc)
        return TrainOutcome(TrainStatus.FAILED, iteration, str(exc))

    iteration.publish_name = publish_name
    print("Done!\n")
    return TrainOutcome(TrainStatus.PUBLISHED, iteration)


def latest_iteration(iterations: list[Iteration]) -> Iteration:
    """Return the most recently created iteration, preferring completed ones.

    A newer iteration that failed or is still training is skipped while an
    older completed one exists.
    """
    if not iterations:
        raise NoIterationError(
            "No trained iteration available: the project has never been trained"
        )
    completed = [it for it in iterations if it.status == COMPLETED]
    return max(completed or iterations, key=lambda it: it.created or _EPOCH)


def ensure_published(
    client: CustomVisionClient,
    project_id: str,
    iteration: Iteration,
    publish_name: str,
    resource_id: str,
) -> bool:
    """Publish a fallback iteration under *publish_name* if it is not already.

    Returns ``True`` when the iteration is (now) published under that name.
    """
    if iteration.publish_name == publish_name:
        return True
    if iteration.status != COMPLETED:
        logger.warning(
            "Iteration %s is %r and cannot be published", iteration.id, iteration.status,
        )
        return False
    try:
        client.publish_iteration(project_id, iteration.id, publish_name, resource_id)
    except CustomVisionError as exc:
        logger.warning("Could not publish iteration %s: %s", iteration.id, exc)
        return False
    iteration.publish_name = publish_name
    logger.info("Published iteration %s as %r", iteration.id, publish_name)
    return True

"""Shared test fixtures for the coilvision test suite."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from coilvision.errors import CustomVisionError, ProjectNotFoundError
from coilvision.models.config import CustomVisionConfig
from coilvision.models.customvision import (
    COMPLETED,
    DONE,
    EXPORTING,
    TRAINING,
    Export,
    ImagePrediction,
    Iteration,
    Prediction,
    Project,
    Tag,
    UploadSummary,
)

# 1x1 white PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01"
    b"\x00\x00\x00\x01\x08\x02\x00\x00\x00\x90wS\xde\x00"
    b"\x00\x00\x0cIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00"
    b"\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)

ENDPOINT = "https://westeurope.api.cognitive.microsoft.com"


# ---------------------------------------------------------------------------
# Scripted console
# ---------------------------------------------------------------------------

class ScriptedInteraction:
    """Replays canned answers; records everything shown."""

    def __init__(self, confirms=(), choices=(), answers=()):
        self.confirms = list(confirms)
        self.choices = list(choices)
        self.answers = list(answers)
        self.questions: list[str] = []
        self.shown: list[str] = []

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.confirms.pop(0)

    def choose(self, prompt: str, options: dict[str, str]) -> str:
        self.questions.append(prompt)
        return self.choices.pop(0)

    def ask(self, prompt: str) -> str:
        self.questions.append(prompt)
        return self.answers.pop(0)

    def show(self, message: str) -> None:
        self.shown.append(message)


# ---------------------------------------------------------------------------
# In-memory Custom Vision service
# ---------------------------------------------------------------------------

class FakeCustomVision:
    """Stateful stand-in for :class:`coilvision.client.CustomVisionClient`.

    Iterations report ``Training`` for *training_polls* status reads, then
    *final_status*.  Exports report ``Exporting`` for *export_polls* reads,
    then ``Done``.
    """

    def __init__(self, project_name="COIL100 Small", training_polls=2,
                 final_status=COMPLETED, export_polls=2):
        self.project_obj = Project(id="proj-1", name=project_name)
        self.tag_store: dict[str, Tag] = {}
        self.uploads: list[tuple[bytes, list[str]]] = []
        self.iteration_store: list[Iteration] = []
        self.published: dict[str, str] = {}
        self.export_store: dict[tuple[str, str], Export] = {}
        self.export_requests: list[tuple[str, str]] = []
        self.downloads: list[tuple[str, Path]] = []
        self.training_polls = training_polls
        self.final_status = final_status
        self.export_polls = export_polls
        self.train_error: CustomVisionError | None = None
        self._polls: dict[str, int] = {}
        self._export_reads: dict[tuple[str, str], int] = {}
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    # projects
    def projects(self):
        return [self.project_obj]

    def project(self, name):
        if name != self.project_obj.name:
            raise ProjectNotFoundError(name)
        return self.project_obj

    # tags & images
    def tags(self, project_id):
        counts: dict[str, int] = {}
        for _, tag_ids in self.uploads:
            for tid in tag_ids:
                counts[tid] = counts.get(tid, 0) + 1
        return [Tag(t.id, t.name, counts.get(t.id, t.image_count)) for t in self.tag_store.values()]

    def create_tag(self, project_id, name):
        tag = Tag(id=f"tag-{next(self._ids)}", name=name)
        self.tag_store[tag.id] = tag
        return tag

    def upload_image(self, project_id, data, tag_ids):
        self.uploads.append((data, list(tag_ids)))
        return UploadSummary(is_batch_successful=True)

    # iterations
    def train(self, project_id):
        if self.train_error is not None:
            raise self.train_error
        self._clock += timedelta(hours=1)
        it = Iteration(id=f"iter-{next(self._ids)}", name=f"Iteration {len(self.iteration_store) + 1}",
                       status=TRAINING, created=self._clock)
        self.iteration_store.append(it)
        self._polls[it.id] = 0
        return Iteration(it.id, it.name, it.status, it.created)

    def iteration(self, project_id, iteration_id):
        it = next(i for i in self.iteration_store if i.id == iteration_id)
        self._polls[it.id] += 1
        if self._polls[it.id] > self.training_polls:
            it.status = self.final_status
        return Iteration(it.id, it.name, it.status, it.created, publish_name=it.publish_name)

    def iterations(self, project_id):
        return list(self.iteration_store)

    def publish_iteration(self, project_id, iteration_id, publish_name, resource_id):
        self.published[publish_name] = iteration_id
        for it in self.iteration_store:
            if it.id == iteration_id:
                it.publish_name = publish_name
        return True

    # prediction
    def classify_image(self, project_id, publish_name, data):
        if publish_name not in self.published:
            raise CustomVisionError("Not published", 404, "NotFound")
        names = [t.name for t in self.tag_store.values()] or ["unknown"]
        share = 1.0 / len(names)
        return ImagePrediction(predictions=[Prediction(n, share) for n in names])

    # exports
    def exports(self, project_id, iteration_id):
        found = []
        for (it_id, platform), exp in self.export_store.items():
            if it_id != iteration_id:
                continue
            if exp.status == EXPORTING:
                key = (it_id, platform)
                self._export_reads[key] = self._export_reads.get(key, 0) + 1
                if self._export_reads[key] > self.export_polls:
                    exp.status = DONE
                    exp.download_uri = f"https://blob.example.com/{platform}.zip"
            found.append(Export(exp.platform, exp.status, exp.download_uri, exp.flavor))
        return found

    def export_iteration(self, project_id, iteration_id, platform, flavor=None):
        self.export_requests.append((iteration_id, platform))
        exp = Export(platform=platform, status=EXPORTING, flavor=flavor)
        self.export_store[(iteration_id, platform)] = exp
        self._export_reads[(iteration_id, platform)] = 0
        return Export(platform, EXPORTING, None, flavor)

    def download_export(self, url, dest):
        dest = Path(dest)
        dest.write_bytes(b"model-bytes")
        self.downloads.append((url, dest))
        return dest


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> CustomVisionConfig:
    return CustomVisionConfig(
        endpoint=ENDPOINT,
        training_key="train-key",
        resource_id="/subscriptions/sub/resourceGroups/rg/providers/"
                    "Microsoft.CognitiveServices/accounts/coil-prediction",
        poll_interval=0,
    )


@pytest.fixture
def fake_cv() -> FakeCustomVision:
    return FakeCustomVision()


@pytest.fixture
def interaction_factory():
    return ScriptedInteraction


@pytest.fixture
def no_sleep():
    """A sleep replacement that records intervals."""
    calls: list[float] = []

    def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Working directory with ``images/obj1__001.png`` and ``Test/obj1__001.png``."""
    (tmp_path / "images").mkdir()
    (tmp_path / "Test").mkdir()
    (tmp_path / "images" / "obj1__001.png").write_bytes(PNG_BYTES)
    (tmp_path / "Test" / "obj1__001.png").write_bytes(PNG_BYTES)
    return tmp_path


@pytest.fixture
def fake_cv_factory():
    return FakeCustomVision


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES

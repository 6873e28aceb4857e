"""Top-level Custom Vision client -- the one-stop public API.

Usage::

    from coilvision import CustomVisionClient

    cv = CustomVisionClient(
        endpoint="https://westeurope.api.cognitive.microsoft.com",
        training_key="...",
        resource_id="/subscriptions/.../accounts/my-prediction",
    )

    project = cv.project("COIL100 Small")
    for tag in cv.tags(project.id):
        print(tag.name, tag.image_count)
"""

from __future__ import annotations

import logging
from pathlib import Path

from coilvision.cv.api import CustomVisionAPI
from coilvision.errors import ProjectNotFoundError
from coilvision.models.config import CustomVisionConfig
from coilvision.models.customvision import (
    Export,
    ImagePrediction,
    Iteration,
    Project,
    Tag,
    UploadSummary,
)

logger = logging.getLogger("coilvision")


class CustomVisionClient:
    """High-level Custom Vision client.

    Parameters
    ----------
    endpoint:
        Cognitive Services endpoint URL.
    training_key:
        Training API key (also used for prediction unless
        *prediction_key* is given).
    resource_id:
        Prediction resource id that iterations are published to.
    config:
        A pre-built :class:`CustomVisionConfig`.  When provided, all other
        keyword args are ignored.
    """

    def __init__(
        self,
        endpoint: str | None = None,
        training_key: str | None = None,
        resource_id: str | None = None,
        *,
        prediction_key: str | None = None,
        timeout: int = 30,
        config: CustomVisionConfig | None = None,
        api: CustomVisionAPI | None = None,
    ) -> None:
        if config is not None:
            self._config = config
        else:
            if endpoint is None:
                raise ValueError("Either 'endpoint' or 'config' must be provided")
            self._config = CustomVisionConfig(
                endpoint=endpoint,
                training_key=training_key or "",
                prediction_key=prediction_key,
                resource_id=resource_id or "",
                timeout=timeout,
            )

        self._api = api or CustomVisionAPI(self._config)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def api(self) -> CustomVisionAPI:
        """The underlying low-level API (for advanced use)."""
        return self._api

    @property
    def config(self) -> CustomVisionConfig:
        return self._config

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def projects(self) -> list[Project]:
        data = self._api.get("projects")
        return [Project.from_api_dict(p) for p in data or []]

    def project(self, name: str) -> Project:
        """Return the project called *name*."""
        for p in self.projects():
            if p.name == name:
                return p
        raise ProjectNotFoundError(name)

    # ------------------------------------------------------------------
    # Tags & images
    # ------------------------------------------------------------------

    def tags(self, project_id: str) -> list[Tag]:
        data = self._api.get(f"projects/{project_id}/tags")
        return [Tag.from_api_dict(t) for t in data or []]

    def create_tag(self, project_id: str, name: str) -> Tag:
        data = self._api.post(f"projects/{project_id}/tags", params={"name": name})
        return Tag.from_api_dict(data or {})

    def upload_image(self, project_id: str, data: bytes, tag_ids: list[str]) -> UploadSummary:
        """Upload one image's raw bytes tagged with *tag_ids*."""
        resp = self._api.post(
            f"projects/{project_id}/images",
            params={"tagIds": ",".join(tag_ids)},
            data=data,
        )
        return UploadSummary.from_api_dict(resp)

    # ------------------------------------------------------------------
    # Iterations
    # ------------------------------------------------------------------

    def train(self, project_id: str) -> Iteration:
        """Queue a new training run."""
        data = self._api.post(f"projects/{project_id}/train")
        return Iteration.from_api_dict(data or {})

    def iteration(self, project_id: str, iteration_id: str) -> Iteration:
        data = self._api.get(f"projects/{project_id}/iterations/{iteration_id}")
        return Iteration.from_api_dict(data or {})

    def iterations(self, project_id: str) -> list[Iteration]:
        data = self._api.get(f"projects/{project_id}/iterations")
        return [Iteration.from_api_dict(i) for i in data or []]

    def publish_iteration(
        self,
        project_id: str,
        iteration_id: str,
        publish_name: str,
        prediction_resource_id: str,
    ) -> bool:
        """Publish an iteration to the prediction resource under *publish_name*."""
        data = self._api.post(
            f"projects/{project_id}/iterations/{iteration_id}/publish",
            params={"publishName": publish_name, "predictionId": prediction_resource_id},
        )
        return data is None or bool(data)

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------

    def classify_image(self, project_id: str, publish_name: str, data: bytes) -> ImagePrediction:
        resp = self._api.predict_post(
            f"{project_id}/classify/iterations/{publish_name}/image", data,
        )
        return ImagePrediction.from_api_dict(resp or {})

    # ------------------------------------------------------------------
    # Exports
    # ------------------------------------------------------------------

    def exports(self, project_id: str, iteration_id: str) -> list[Export]:
        data = self._api.get(f"projects/{project_id}/iterations/{iteration_id}/export")
        return [Export.from_api_dict(e) for e in data or []]

    def export_iteration(
        self,
        project_id: str,
        iteration_id: str,
        platform: str,
        flavor: str | None = None,
    ) -> Export:
        """Request an export of an iteration for *platform*."""
        params = {"platform": platform}
        if flavor:
            params["flavor"] = flavor
        data = self._api.post(
            f"projects/{project_id}/iterations/{iteration_id}/export", params=params,
        )
        return Export.from_api_dict(data or {"platform": platform})

    def download_export(self, url: str, dest: str | Path) -> Path:
        return self._api.download(url, dest)

"""Tests for the end-to-end pipeline."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from coilvision.errors import (
    ConfigurationError,
    CustomVisionError,
    NoIterationError,
    ProjectNotFoundError,
    UnrecognizedImageError,
)
from coilvision.models.config import CustomVisionConfig
from coilvision.models.customvision import FAILED
from coilvision.train.export import MENU_END, MENU_TENSORFLOW
from coilvision.train.pipeline import run_pipeline
from coilvision.train.trainer import TrainStatus


class TestRunPipeline:
    def test_fresh_project_end_to_end(self, config, fake_cv, interaction_factory, workdir, no_sleep):
        ui = interaction_factory(confirms=[False])

        result = run_pipeline(config, ui, client=fake_cv, workdir=workdir, sleep=no_sleep)

        # tag for label 1 created, image uploaded under it
        assert "dristan cold box" in result.tags.created
        tag_id = result.tags["dristan cold box"].id
        assert fake_cv.uploads == [((workdir / "images" / "obj1__001.png").read_bytes(), [tag_id])]
        assert result.uploaded == 1

        # trained and published
        assert result.train_outcome.status is TrainStatus.PUBLISHED
        assert fake_cv.published["coil100Model"] == result.iteration.id

        # predictions over Test/
        preds = result.predictions["obj1__001.png"]
        assert preds
        assert sum(p.probability for p in preds) == pytest.approx(1.0)

        # no upload prompt on a fresh project; export declined
        assert ui.questions == ["Do you want to export the model?"]
        assert result.exported == []

    def test_declining_upload_falls_back_to_latest_iteration(
        self, config, fake_cv, interaction_factory, workdir, no_sleep,
    ):
        run_pipeline(config, interaction_factory(confirms=[False]),
                     client=fake_cv, workdir=workdir, sleep=no_sleep)
        first_iteration = fake_cv.iteration_store[-1].id

        ui = interaction_factory(confirms=[False, False])
        result = run_pipeline(config, ui, client=fake_cv, workdir=workdir, sleep=no_sleep)

        assert ui.questions[0] == "Do you want to upload more images?"
        assert any("already 1 training images" in s for s in ui.shown)
        assert result.uploaded == 0
        assert result.train_outcome is None
        assert result.iteration.id == first_iteration
        assert len(fake_cv.uploads) == 1
        assert len(fake_cv.tag_store) == 17

    def test_training_not_needed_falls_back(
        self, config, fake_cv, interaction_factory, workdir, no_sleep,
    ):
        run_pipeline(config, interaction_factory(confirms=[False]),
                     client=fake_cv, workdir=workdir, sleep=no_sleep)
        fake_cv.train_error = CustomVisionError(
            "Nothing changed since last training", 400, "BadRequestTrainingNotNeeded",
        )

        result = run_pipeline(config, interaction_factory(confirms=[True, False]),
                              client=fake_cv, workdir=workdir, sleep=no_sleep)

        assert result.train_outcome.status is TrainStatus.NO_CHANGES
        assert result.iteration.id == fake_cv.iteration_store[-1].id
        assert result.predictions

    def test_failed_training_with_no_iterations_is_fatal(
        self, config, fake_cv_factory, interaction_factory, workdir, no_sleep,
    ):
        cv = fake_cv_factory(final_status=FAILED)
        cv.train_error = CustomVisionError("boom", 500)

        with pytest.raises(NoIterationError):
            run_pipeline(config, interaction_factory(), client=cv, workdir=workdir, sleep=no_sleep)

    def test_failed_iteration_is_not_published_but_fallback_tries(
        self, config, fake_cv_factory, interaction_factory, workdir, no_sleep,
    ):
        cv = fake_cv_factory(final_status=FAILED)

        result = run_pipeline(config, interaction_factory(confirms=[False]),
                              client=cv, workdir=workdir, sleep=no_sleep)

        assert result.train_outcome.status is TrainStatus.FAILED
        assert result.iteration.status == FAILED
        assert cv.published == {}
        # prediction against an unpublished model fails per image and is skipped
        assert result.predictions == {}

    def test_failed_retrain_falls_back_to_completed_iteration(
        self, config, fake_cv, interaction_factory, workdir, no_sleep,
    ):
        run_pipeline(config, interaction_factory(confirms=[False]),
                     client=fake_cv, workdir=workdir, sleep=no_sleep)
        good = fake_cv.iteration_store[-1].id
        fake_cv.final_status = FAILED

        ui = interaction_factory(confirms=[True, True], choices=[MENU_TENSORFLOW, MENU_END])
        result = run_pipeline(config, ui, client=fake_cv, workdir=workdir, sleep=no_sleep)

        assert result.train_outcome.status is TrainStatus.FAILED
        assert fake_cv.iteration_store[-1].status == FAILED
        assert result.iteration.id == good
        assert fake_cv.published["coil100Model"] == good
        assert result.predictions
        assert fake_cv.export_requests == [(good, "TensorFlow")]
        assert result.exported == [workdir / "coil100Model_TensorFlow.zip"]

    def test_export_loop(self, config, fake_cv, interaction_factory, workdir, no_sleep):
        config.output_dir = "out"
        (workdir / "out").mkdir()
        ui = interaction_factory(confirms=[True], choices=[MENU_TENSORFLOW, MENU_END])

        result = run_pipeline(config, ui, client=fake_cv, workdir=workdir, sleep=no_sleep)

        assert result.exported == [workdir / "out" / "coil100Model_TensorFlow.zip"]
        assert len(fake_cv.export_requests) == 1

    def test_bad_filename_aborts_before_upload(
        self, config, fake_cv, interaction_factory, workdir, png_bytes, no_sleep,
    ):
        (workdir / "images" / "notes.png").write_bytes(png_bytes)

        with pytest.raises(UnrecognizedImageError, match="notes.png"):
            run_pipeline(config, interaction_factory(), client=fake_cv, workdir=workdir, sleep=no_sleep)
        assert fake_cv.uploads == []

    def test_capitalised_images_dir(self, config, fake_cv, interaction_factory, workdir, no_sleep):
        (workdir / "images").rename(workdir / "Images")

        result = run_pipeline(config, interaction_factory(confirms=[False]),
                              client=fake_cv, workdir=workdir, sleep=no_sleep)

        assert result.uploaded == 1

    def test_explicit_images_dir(self, config, fake_cv, interaction_factory, workdir, no_sleep):
        (workdir / "images").rename(workdir / "train")
        config.images_dir = "train"

        result = run_pipeline(config, interaction_factory(confirms=[False]),
                              client=fake_cv, workdir=workdir, sleep=no_sleep)

        assert result.uploaded == 1

    def test_project_not_found(self, config, fake_cv, interaction_factory, workdir):
        config.project_name = "Missing"
        with pytest.raises(ProjectNotFoundError):
            run_pipeline(config, interaction_factory(), client=fake_cv, workdir=workdir)

    def test_config_checked_before_any_remote_call(self, interaction_factory, workdir):
        client = MagicMock()

        with pytest.raises(ConfigurationError):
            run_pipeline(CustomVisionConfig(), interaction_factory(), client=client, workdir=workdir)

        assert client.method_calls == []

    @patch("coilvision.train.pipeline.CustomVisionClient")
    def test_builds_client_from_config(self, mock_client_cls, config, interaction_factory, workdir):
        mock_client_cls.return_value.project.side_effect = ProjectNotFoundError("COIL100 Small")

        with pytest.raises(ProjectNotFoundError):
            run_pipeline(config, interaction_factory(), workdir=workdir)

        mock_client_cls.assert_called_once_with(config=config)

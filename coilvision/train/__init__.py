"""coilvision.train -- tag, upload, train, predict and export workflow.

Run::

    python -m coilvision --config coilvision.yaml

Programmatic::

    from coilvision.console import ConsoleInteraction
    from coilvision.models.config import load_config
    from coilvision.train import run_pipeline

    result = run_pipeline(load_config("coilvision.yaml"), ConsoleInteraction())
"""

from __future__ import annotations

from coilvision.train.pipeline import PipelineResult, run_pipeline

__all__: list[str] = ["PipelineResult", "run_pipeline"]

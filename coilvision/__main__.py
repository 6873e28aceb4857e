"""CLI entry point: ``python -m coilvision``."""

from __future__ import annotations

import argparse
import sys


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        description="Train, publish, test and export a Custom Vision classifier for COIL-100",
        prog="python -m coilvision",
    )
    ap.add_argument(
        "--config",
        help="Path to a YAML config file (CustomVisionConfig). CLI flags override it.",
    )
    ap.add_argument("--endpoint", help="Custom Vision endpoint URL (env: CUSTOMVISION_ENDPOINT)")
    ap.add_argument("--key", dest="training_key", help="Training key (env: CUSTOMVISION_KEY)")
    ap.add_argument(
        "--prediction-key",
        help="Prediction key, if different from the training key (env: CUSTOMVISION_PREDICTION_KEY)",
    )
    ap.add_argument(
        "--resource-id",
        help="Prediction resource id to publish to (env: CUSTOMVISION_RESOURCE_ID)",
    )
    ap.add_argument("--project", dest="project_name", help="Project name (default: COIL100 Small)")
    ap.add_argument("--publish-name", help="Published model name (default: coil100Model)")
    ap.add_argument("--images-dir", help="Training images (default: images or Images)")
    ap.add_argument("--test-dir", help="Test images (default: Test)")
    ap.add_argument("--output-dir", help="Where exported models are written (default: .)")
    ap.add_argument("--poll-interval", type=float, help="Seconds between status polls (default: 1)")
    ap.add_argument("--max-polls", type=int, help="Give up after this many polls (default: no limit)")
    ap.add_argument("--log-file", help="Also write a debug log to this file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug output on stderr")

    args = ap.parse_args(argv)

    from coilvision.console import ConsoleInteraction
    from coilvision.errors import CoilVisionError
    from coilvision.log import setup_logging
    from coilvision.models.config import load_config
    from coilvision.train.pipeline import run_pipeline

    logger = setup_logging(verbose=args.verbose, log_file=args.log_file)

    overrides = {
        "endpoint": args.endpoint,
        "training_key": args.training_key,
        "prediction_key": args.prediction_key,
        "resource_id": args.resource_id,
        "project_name": args.project_name,
        "publish_name": args.publish_name,
        "images_dir": args.images_dir,
        "test_dir": args.test_dir,
        "output_dir": args.output_dir,
        "poll_interval": args.poll_interval,
        "max_polls": args.max_polls,
    }

    try:
        config = load_config(args.config, overrides)
        run_pipeline(config, ConsoleInteraction())
    except (CoilVisionError, ValueError, FileNotFoundError) as exc:
        logger.debug("Run aborted", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nAborted.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())

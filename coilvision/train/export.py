"""Model export: request, wait, download, and the interactive export menu."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from coilvision.client import CustomVisionClient
from coilvision.console import Interaction
from coilvision.errors import CustomVisionError
from coilvision.models.customvision import DONE, EXPORTING, Export
from coilvision.train.trainer import poll_until

logger = logging.getLogger("coilvision.train")


@dataclass(frozen=True)
class ExportPlatform:
    """A target runtime and the extension of its downloaded artifact."""
    name: str
    extension: str
    flavor: str | None = None


TENSORFLOW = ExportPlatform("TensorFlow", "zip")
COREML = ExportPlatform("CoreML", "zip")

MENU_TENSORFLOW = "1"
MENU_COREML = "2"
MENU_OTHER = "3"
MENU_END = "4"

EXPORT_MENU: dict[str, str] = {
    MENU_TENSORFLOW: "TensorFlow",
    MENU_COREML: "CoreML",
    MENU_OTHER: "Other platform",
    MENU_END: "End",
}

_PRESETS: dict[str, ExportPlatform] = {
    MENU_TENSORFLOW: TENSORFLOW,
    MENU_COREML: COREML,
}


class ExportState(str, Enum):
    IDLE = "idle"
    PLATFORM_SELECTED = "platform_selected"
    EXPORTING = "exporting"
    DONE = "done"
    ERROR = "error"
    TERMINATED = "terminated"


def export_filename(publish_name: str, platform: str, extension: str) -> str:
    """``<publishName>_<platform>.<extension>``"""
    return f"{publish_name}_{platform}.{extension.lstrip('.')}"


def _find_export(exports: list[Export], platform: ExportPlatform) -> Export | None:
    for exp in exports:
        if exp.platform == platform.name and (platform.flavor is None or exp.flavor == platform.flavor):
            return exp
    return None


def export_model(
    client: CustomVisionClient,
    project_id: str,
    iteration_id: str,
    platform: ExportPlatform,
    publish_name: str,
    output_dir: Path,
    *,
    interval: float = 1.0,
    max_polls: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Path:
    """Export *iteration_id* for *platform* and download it into *output_dir*.

    An existing export for the platform is reused; otherwise exactly one is
    requested.

    Raises
    ------
    CustomVisionError
        When the export ends in any status other than ``Done``.
    """
    export = _find_export(client.exports(project_id, iteration_id), platform)
    if export is not None and export.status not in (EXPORTING, DONE):
        logger.info("Previous %s export is %r, requesting a new one", platform.name, export.status)
        export = None
    if export is None:
        print(f"Requesting {platform.name} export")
        export = client.export_iteration(project_id, iteration_id, platform.name, platform.flavor)
    else:
        logger.debug("Reusing existing %s export (%s)", platform.name, export.status)

    def _refresh() -> Export:
        found = _find_export(client.exports(project_id, iteration_id), platform)
        # A fresh request can take a moment to show up in the listing
        return found or Export(platform=platform.name, status=EXPORTING)

    export = poll_until(
        _refresh,
        export,
        EXPORTING,
        interval=interval,
        max_polls=max_polls,
        sleep=sleep,
        on_status=lambda e: print(f"Export status: {e.status}"),
        what=f"{platform.name} export",
    )

    if export.status != DONE:
        raise CustomVisionError(f"{platform.name} export ended with status {export.status!r}")
    if not export.download_uri:
        raise CustomVisionError(f"{platform.name} export has no download URL")

    dest = Path(output_dir) / export_filename(publish_name, platform.name, platform.extension)
    client.download_export(export.download_uri, dest)
    print(f"Model exported to {dest}")
    return dest


def _select_platform(interaction: Interaction) -> ExportPlatform | None:
    """Ask for a platform; ``None`` means the user chose to end."""
    while True:
        choice = interaction.choose("Choose the export platform:", EXPORT_MENU)
        if choice == MENU_END:
            return None
        if choice in _PRESETS:
            return _PRESETS[choice]
        name = interaction.ask("Platform name").strip()
        extension = interaction.ask("File extension").strip().lstrip(".")
        if name and extension:
            return ExportPlatform(name, extension)
        interaction.show("Both a platform name and a file extension are required.")


def run_export_loop(
    client: CustomVisionClient,
    project_id: str,
    iteration_id: str,
    publish_name: str,
    output_dir: Path,
    interaction: Interaction,
    *,
    interval: float = 1.0,
    max_polls: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[Path]:
    """Export repeatedly until the user picks *End*.

    A failed attempt is logged and the menu is shown again.  Returns the
    files written.
    """
    written: list[Path] = []
    state = ExportState.IDLE
    while True:
        platform = _select_platform(interaction)
        if platform is None:
            logger.debug("Export state -> %s", ExportState.TERMINATED.value)
            break
        state = ExportState.PLATFORM_SELECTED
        logger.debug("Export state -> %s (%s)", state.value, platform.name)

        try:
            state = ExportState.EXPORTING
            written.append(export_model(
                client, project_id, iteration_id, platform, publish_name, output_dir,
                interval=interval, max_polls=max_polls, sleep=sleep,
            ))
            state = ExportState.DONE
        except Exception as exc:
            state = ExportState.ERROR
            logger.error("Export to %s failed: %s", platform.name, exc, exc_info=True)
            interaction.show(f"Export to {platform.name} failed: {exc}")
        logger.debug("Export state -> %s", state.value)

    return written

"""COIL-100 label table and filename-to-label resolution.

Training images are named ``<3-char marker><id>__<rest>.<ext>``, e.g.
``obj1__001.png`` is label ``1`` (dristan cold box).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterator, Mapping

from coilvision.errors import UnrecognizedImageError

_MARKER_LEN = 3
_DELIMITER = "__"


@dataclass(frozen=True)
class Label:
    """One class of the classifier."""
    id: int
    name: str


class LabelMap:
    """Immutable ``id -> Label`` table, iterated in id order."""

    def __init__(self, labels: Mapping[int, str]) -> None:
        self._labels: dict[int, Label] = {
            int(k): Label(int(k), v) for k, v in sorted(labels.items())
        }

    @classmethod
    def from_dict(cls, labels: Mapping[int | str, str]) -> "LabelMap":
        """Build from a mapping whose keys may be strings (YAML / JSON)."""
        return cls({int(k): str(v) for k, v in labels.items()})

    def get(self, label_id: int) -> Label | None:
        return self._labels.get(label_id)

    def names(self) -> list[str]:
        return [lb.name for lb in self._labels.values()]

    def __iter__(self) -> Iterator[Label]:
        return iter(self._labels.values())

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, label_id: object) -> bool:
        return label_id in self._labels

    def __repr__(self) -> str:
        return f"LabelMap({len(self)} labels)"


COIL100_LABELS = LabelMap({
    1: "dristan cold box",
    2: "onion",
    4: "tomato",
    5: "rolaids bottle",
    7: "arizona iced tea",
    10: "cup",
    14: "cat",
    19: "firetruck car",
    28: "frog",
    31: "tylenol",
    33: "glue",
    35: "porcelain plate",
    37: "toy tank",
    46: "marlboro cigarette box",
    47: "donut toy",
    48: "piggy bank",
    49: "canada dry ginger ale",
})


def parse_label_id(filename: str) -> int:
    """Extract the numeric label id encoded in an image filename.

    The id is the text between the 3-character marker and the first
    ``__``.  Directory components are ignored.

    Raises
    ------
    UnrecognizedImageError
        If the name does not follow the convention.
    """
    base = os.path.basename(filename)
    head, sep, _ = base.partition(_DELIMITER)
    if not sep:
        raise UnrecognizedImageError(base, f"missing {_DELIMITER!r} delimiter")
    digits = head[_MARKER_LEN:]
    if not digits:
        raise UnrecognizedImageError(base, "no label id after the 3-character marker")
    if not (digits.isascii() and digits.isdigit()):
        raise UnrecognizedImageError(base, f"label id {digits!r} is not an integer")
    return int(digits)


def resolve_label(filename: str, label_map: LabelMap = COIL100_LABELS) -> Label:
    """Return the :class:`Label` an image filename belongs to."""
    label_id = parse_label_id(filename)
    label = label_map.get(label_id)
    if label is None:
        raise UnrecognizedImageError(
            os.path.basename(filename), f"unknown label id {label_id}",
        )
    return label

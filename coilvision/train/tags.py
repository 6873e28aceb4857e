"""Make sure the project has one tag per configured label."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from coilvision.client import CustomVisionClient
from coilvision.models.customvision import Tag
from coilvision.models.labels import LabelMap

logger = logging.getLogger("coilvision.train")


@dataclass
class TagSet:
    """Tags covering every configured label."""

    tags: dict[str, Tag] = field(default_factory=dict)
    existing_image_count: int = 0      # images already attached to reused tags
    created: list[str] = field(default_factory=list)

    def __getitem__(self, name: str) -> Tag:
        return self.tags[name]

    def __len__(self) -> int:
        return len(self.tags)


def reconcile_tags(
    client: CustomVisionClient,
    project_id: str,
    label_map: LabelMap,
) -> TagSet:
    """Reuse existing tags by exact name and create the missing ones.

    Safe to rerun: a second call against the same project creates nothing.
    """
    existing = {t.name: t for t in client.tags(project_id)}
    result = TagSet()

    for label in label_map:
        tag = existing.get(label.name)
        if tag is not None:
            result.existing_image_count += tag.image_count
            logger.debug("Tag %r exists (id=%s, %d images)", tag.name, tag.id, tag.image_count)
        else:
            tag = client.create_tag(project_id, label.name)
            result.created.append(label.name)
            print(f"Tag {tag.name} added")
        result.tags[label.name] = tag

    logger.info(
        "%d tags ready (%d created), %d images already uploaded",
        len(result), len(result.created), result.existing_image_count,
    )
    return result

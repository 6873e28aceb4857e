"""coilvision.cv -- Custom Vision REST layer.

Re-exports the public surface so callers can do::

    from coilvision.cv import CustomVisionAPI
"""

from coilvision.cv.api import CustomVisionAPI

__all__ = [
    "CustomVisionAPI",
]

"""
In-memory gallery of generated images.

Holds the ordered collection, the selection set and the preview pointer,
and keeps them consistent: a removed id never survives in the selection,
and the preview always points at an image that is still here (or nowhere).
"""

from typing import List, Optional, Set, Tuple

from studio.errors import UnknownImageError
from studio.models import GeneratedImage

EXPORT_NAME = "studio-export-{n}.png"


class CollectionManager:

    def __init__(self):
        self.items: List[GeneratedImage] = []
        self.selected: Set[str] = set()
        self.preview_id: Optional[str] = None

    def __len__(self):
        return len(self.items)

    def __contains__(self, image_id: str):
        return any(item.id == image_id for item in self.items)

    def get(self, image_id: str) -> GeneratedImage:
        for item in self.items:
            if item.id == image_id:
                return item
        raise UnknownImageError(image_id)

    def selected_ids(self) -> List[str]:
        """Selected ids in collection order."""
        return [item.id for item in self.items if item.id in self.selected]

    def clear(self):
        self.items = []
        self.selected = set()
        self.preview_id = None

    def append(self, item: GeneratedImage):
        was_empty = not self.items
        self.items.append(item)
        if was_empty:
            self.preview_id = item.id

    def set_preview(self, image_id: str):
        self.get(image_id)
        self.preview_id = image_id

    def _reset_preview(self):
        self.preview_id = self.items[0].id if self.items else None

    def delete(self, image_id: str):
        if image_id not in self:
            raise UnknownImageError(image_id)
        self.items = [item for item in self.items if item.id != image_id]
        if self.preview_id == image_id:
            self._reset_preview()
        self.selected.discard(image_id)

    def bulk_delete(self) -> int:
        """Drop every selected image. Returns how many were removed."""
        before = len(self.items)
        self.items = [item for item in self.items if item.id not in self.selected]
        if self.preview_id in self.selected:
            self._reset_preview()
        self.selected = set()
        return before - len(self.items)

    def toggle_select(self, image_id: str):
        if image_id in self.selected:
            self.selected.discard(image_id)
        elif image_id in self:
            self.selected.add(image_id)

    def select_all(self):
        if self.items and len(self.selected) == len(self.items):
            self.selected = set()
        else:
            self.selected = {item.id for item in self.items}

    def export_plan(self) -> List[Tuple[str, GeneratedImage]]:
        """Pair each selected image with its download name, in collection order."""
        chosen = [item for item in self.items if item.id in self.selected]
        return [(EXPORT_NAME.format(n=i + 1), item) for i, item in enumerate(chosen)]

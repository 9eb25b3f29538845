from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from learninghub.core.context import StoreContext
from learninghub.core.events import BOOKMARK_ADDED, BOOKMARK_REMOVED
from learninghub.core.state import SNIPPET_LENGTH, Bookmark


class BookmarkRegistry:
    """Saved references to units, at most one per unit id."""

    def __init__(self, context: StoreContext) -> None:
        self._ctx = context

    @property
    def _bookmarks(self) -> List[Bookmark]:
        return self._ctx.state.bookmarks

    def _index_of(self, unit_id: str) -> int:
        for index, bookmark in enumerate(self._bookmarks):
            if bookmark.unit_id == unit_id:
                return index
        return -1

    def _new_id(self, created_at: int) -> str:
        taken = {bookmark.id for bookmark in self._bookmarks}
        candidate = str(created_at)
        suffix = 1
        while candidate in taken:
            candidate = f"{created_at}-{suffix}"
            suffix += 1
        return candidate

    def add_bookmark(self, unit_id: str, title: str, path: str, content: str = "") -> Bookmark:
        created_at = self._ctx.now_ms()
        bookmark = Bookmark(
            id=self._new_id(created_at),
            unit_id=unit_id,
            title=title,
            path=path,
            content_snippet=content[:SNIPPET_LENGTH],
            created_at=created_at,
        )
        index = self._index_of(unit_id)
        if index != -1:
            self._bookmarks[index] = bookmark
        else:
            self._bookmarks.insert(0, bookmark)

        self._ctx.commit()
        self._ctx.publish(BOOKMARK_ADDED, replace(bookmark))
        return replace(bookmark)

    def remove_bookmark(self, unit_id: str) -> Optional[Bookmark]:
        index = self._index_of(unit_id)
        if index == -1:
            return None
        removed = self._bookmarks.pop(index)
        self._ctx.commit()
        self._ctx.publish(BOOKMARK_REMOVED, replace(removed))
        return replace(removed)

    def toggle(self, unit_id: str, title: str, path: str, content: str = "") -> bool:
        """Add or remove the bookmark for a unit. Returns the new state."""
        if self.is_bookmarked(unit_id):
            self.remove_bookmark(unit_id)
            return False
        self.add_bookmark(unit_id, title, path, content)
        return True

    def is_bookmarked(self, unit_id: str) -> bool:
        return self._index_of(unit_id) != -1

    def list(self) -> List[Bookmark]:
        """All bookmarks, most recently created first."""
        return sorted(
            (replace(b) for b in self._bookmarks), key=lambda b: b.created_at, reverse=True
        )

    def search(self, query: str) -> List[Bookmark]:
        needle = query.lower()
        return [
            replace(b)
            for b in self._bookmarks
            if needle in b.title.lower()
            or needle in b.path.lower()
            or needle in b.content_snippet.lower()
        ]

    def __len__(self) -> int:
        return len(self._bookmarks)

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import yaml

from learninghub.core.errors import CatalogError

DEFAULT_CATALOG = Path(__file__).resolve().parent.parent / "data" / "catalog.yaml"


@dataclass(frozen=True)
class Unit:
    id: str
    title: str
    path: str
    track: str
    category: str = ""


class UnitCatalog:
    """Ordered list of learning units read from a YAML file.

    Only ids, titles and paths are loaded; unit bodies live with the content
    layer. The state core uses the catalog for its size and for labels.
    """

    def __init__(self, units: List[Unit]) -> None:
        self._units: Dict[str, Unit] = {}
        for unit in units:
            if unit.id in self._units:
                raise CatalogError(f"duplicate unit id: {unit.id}")
            self._units[unit.id] = unit
        self._order = list(self._units)

    @classmethod
    def default(cls) -> "UnitCatalog":
        return cls.from_file(DEFAULT_CATALOG)

    @classmethod
    def from_file(cls, path: Path) -> "UnitCatalog":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog file not found: {path}")
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise CatalogError(f"{path.name}: expected YAML with 'tracks'")
        tracks = raw.get("tracks")
        if not isinstance(tracks, list) or not tracks:
            raise CatalogError(f"{path.name}: 'tracks' must be a non-empty list")

        units: List[Unit] = []
        for track in tracks:
            if not isinstance(track, dict) or not track.get("id"):
                raise CatalogError(f"{path.name}: every track needs an 'id'")
            track_title = str(track.get("title") or track["id"]).strip()
            for item in track.get("units") or []:
                if not isinstance(item, dict):
                    raise CatalogError(f"{path.name}: unit entries must be mappings")
                unit_id = item.get("id")
                title = item.get("title")
                if not unit_id or not isinstance(unit_id, str):
                    raise CatalogError(f"{path.name}: unit in '{track['id']}' has no 'id'")
                if not title or not isinstance(title, str):
                    raise CatalogError(f"{path.name}: missing or invalid 'title' for {unit_id}")
                units.append(
                    Unit(
                        id=unit_id.strip(),
                        title=title.strip(),
                        # default to a breadcrumb built from the track and title
                        path=str(item.get("path") or f"{track_title} > {title.strip()}"),
                        track=str(track["id"]),
                        category=str(item.get("category") or ""),
                    )
                )
        if not units:
            raise CatalogError(f"{path.name}: no units defined")
        return cls(units)

    def all(self) -> List[Unit]:
        return [self._units[key] for key in self._order]

    def get(self, unit_id: str) -> Unit:
        return self._units[unit_id]

    def next_unit(self, unit_id: str) -> Optional[Unit]:
        index = self._position(unit_id) + 1
        return self._units[self._order[index]] if index < len(self._order) else None

    def previous_unit(self, unit_id: str) -> Optional[Unit]:
        index = self._position(unit_id) - 1
        return self._units[self._order[index]] if index >= 0 else None

    def _position(self, unit_id: str) -> int:
        if unit_id not in self._units:
            raise KeyError(unit_id)
        return self._order.index(unit_id)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units

    def __iter__(self) -> Iterator[Unit]:
        return iter(self.all())

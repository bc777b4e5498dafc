import random
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

Point = Tuple[float, float]


class OwnershipError(KeyError):
    """Raised when an ownership transfer names a territory that does not exist."""


@dataclass
class Territory:
    id: str
    x: float
    y: float
    width: float
    height: float
    owner_id: Optional[str] = None

    @property
    def centroid(self) -> Point:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        px, py = point
        return self.x <= px <= self.x + self.width and self.y <= py <= self.y + self.height

    def random_point(self, rng: random.Random) -> Point:
        return (self.x + rng.random() * self.width, self.y + rng.random() * self.height)


class TerritoryGrid:
    """
    Fixed partition of the map into rectangular land cells.
    Ocean cells are absent from the store. Cells are never added or removed
    after generation; only ownership changes, through transfer_ownership().
    """

    def __init__(self, territories: Iterable[Territory], rows: int, cols: int,
                 map_width: float, map_height: float):
        self.rows = rows
        self.cols = cols
        self.map_width = map_width
        self.map_height = map_height
        self.cell_width = map_width / cols
        self.cell_height = map_height / rows

        self._territories: List[Territory] = list(territories)
        self._by_id: Dict[str, Territory] = {t.id: t for t in self._territories}
        self._index: Dict[str, int] = {t.id: i for i, t in enumerate(self._territories)}
        self._by_cell: Dict[Tuple[int, int], Territory] = {}
        for t in self._territories:
            row = int(round(t.y / self.cell_height))
            col = int(round(t.x / self.cell_width))
            self._by_cell[(row, col)] = t

        # Geometry never changes, so centroids are computed once
        if self._territories:
            self._centroids = np.array([t.centroid for t in self._territories], dtype=float)
        else:
            self._centroids = np.empty((0, 2), dtype=float)

    @classmethod
    def generate(cls, rows: int, cols: int, map_width: float, map_height: float,
                 land_probability: float, rng: random.Random) -> "TerritoryGrid":
        """Tile the map row-major into rows x cols cells, keeping each as land with land_probability."""
        width = map_width / cols
        height = map_height / rows
        territories = []
        for i in range(rows):
            for j in range(cols):
                if rng.random() < land_probability:
                    territories.append(Territory(
                        id=f"territory-{i}-{j}",
                        x=j * width,
                        y=i * height,
                        width=width,
                        height=height,
                    ))
        return cls(territories, rows, cols, map_width, map_height)

    def __iter__(self) -> Iterator[Territory]:
        return iter(self._territories)

    def __len__(self) -> int:
        return len(self._territories)

    def get(self, territory_id: str) -> Optional[Territory]:
        return self._by_id.get(territory_id)

    def find_containing(self, point: Point) -> Optional[Territory]:
        """Return the territory whose cell contains point, or None for ocean / off-map."""
        px, py = point
        if not (0 <= px <= self.map_width and 0 <= py <= self.map_height):
            return None
        # Shared edges belong to the lower-right cell, except on the map border
        col = min(int(px // self.cell_width), self.cols - 1)
        row = min(int(py // self.cell_height), self.rows - 1)
        territory = self._by_cell.get((row, col))
        if territory is not None:
            return territory

        # On an edge shared with ocean, the land cell on the other side still contains the point
        for dr, dc in ((0, -1), (-1, 0), (-1, -1)):
            neighbor = self._by_cell.get((row + dr, col + dc))
            if neighbor is not None and neighbor.contains(point):
                return neighbor
        return None

    def owned_by(self, country_id: str) -> List[Territory]:
        return [t for t in self._territories if t.owner_id == country_id]

    def unowned(self) -> List[Territory]:
        return [t for t in self._territories if t.owner_id is None]

    def unowned_mask(self) -> np.ndarray:
        """Boolean mask over store order, True where the territory has no owner."""
        return np.array([t.owner_id is None for t in self._territories], dtype=bool)

    def neighbors_of(self, territory: Territory, radius: float,
                     unowned_mask: Optional[np.ndarray] = None) -> List[Territory]:
        """
        All unowned territories whose centroid lies within Euclidean radius of
        territory's centroid. Recomputed from scratch on every call.
        """
        return self.frontier_of([territory], radius, unowned_mask)

    def frontier_of(self, territories: Iterable[Territory], radius: float,
                    unowned_mask: Optional[np.ndarray] = None) -> List[Territory]:
        """
        Union of neighbors_of() over territories, deduplicated, in store order.
        unowned_mask lets callers evaluate against an earlier ownership snapshot.
        """
        sources = np.array([t.centroid for t in territories], dtype=float)
        if sources.size == 0 or not self._territories:
            return []
        if unowned_mask is None:
            unowned_mask = self.unowned_mask()

        # (sources x store) distance matrix
        deltas = self._centroids[np.newaxis, :, :] - sources[:, np.newaxis, :]
        distances = np.hypot(deltas[..., 0], deltas[..., 1])
        within = (distances <= radius).any(axis=0) & unowned_mask
        return [self._territories[i] for i in np.flatnonzero(within)]

    def transfer_ownership(self, territory_id: str, new_owner_id: str) -> Territory:
        """Reassign a territory's owner. The only mutator of the store."""
        territory = self._by_id.get(territory_id)
        if territory is None:
            raise OwnershipError(territory_id)
        if new_owner_id is None:
            raise ValueError(f"{territory_id}: ownership cannot be cleared")
        territory.owner_id = new_owner_id
        return territory

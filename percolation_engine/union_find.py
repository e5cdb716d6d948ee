"""
Connectivity engines for the percolation grid.

Two interchangeable disjoint-set (union-find) backings share one contract:

  Weighted quick-union
      Tree forest with union-by-size and path compression.  Near-constant
      amortised cost per operation.

  Naive quick-find
      Flat label array.  ``find`` is a single lookup, ``union`` rewrites every
      label equal to the absorbed component's label, O(N) per union.  This is
      the performance foil for the comparison runs and is kept deliberately
      slow.

Both engines are selected at runtime through :class:`EngineKind` so the
grid and the Monte Carlo harness never duplicate code per backing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

import numpy as np


# ---------------------------------------------------------------------------
# Engine selection
# ---------------------------------------------------------------------------


class EngineKind(str, Enum):
    """Runtime tag for the union-find backing."""

    WEIGHTED = "weighted"
    NAIVE = "naive"

    @classmethod
    def parse(cls, value: str | EngineKind) -> EngineKind:
        """Coerce a config / CLI string (case-insensitive) to an EngineKind.

        Raises
        ------
        ValueError
            If ``value`` names no known engine.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = sorted(k.value for k in cls)
            raise ValueError(
                f"engine must be one of {valid}, got {value!r}"
            ) from None


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class ConnectivityEngine(ABC):
    """Common interface for union-find backings over nodes ``0 .. size-1``."""

    kind: EngineKind

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError(f"size must be > 0; got {size}.")
        self._size = int(size)
        self._count = int(size)

    def __len__(self) -> int:
        return self._size

    @property
    def count(self) -> int:
        """Number of disjoint components."""
        return self._count

    def _validate(self, x: int) -> None:
        if not (0 <= x < self._size):
            raise IndexError(f"index {x} is not between 0 and {self._size - 1}")

    @abstractmethod
    def find(self, x: int) -> int:
        """Return the canonical representative of the component containing x."""

    @abstractmethod
    def union(self, x: int, y: int) -> None:
        """Merge the components containing x and y (no-op if already merged)."""

    def connected(self, x: int, y: int) -> bool:
        """Return True iff x and y are in the same component."""
        return self.find(x) == self.find(y)


# ---------------------------------------------------------------------------
# Weighted quick-union with path compression
# ---------------------------------------------------------------------------


class WeightedUnionFind(ConnectivityEngine):
    """Union-by-size forest with two-pass path compression.

    ``find`` is not a pure query: every node visited on the way to the root
    is re-parented directly onto the root.
    """

    kind = EngineKind.WEIGHTED

    def __init__(self, size: int) -> None:
        super().__init__(size)
        self.parent: list[int] = list(range(self._size))
        self.size: list[int] = [1] * self._size

    def find(self, x: int) -> int:
        self._validate(x)
        parent = self.parent

        root = x
        while root != parent[root]:
            root = parent[root]

        while x != root:
            next_x = parent[x]
            parent[x] = root
            x = next_x

        return root

    def union(self, x: int, y: int) -> None:
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x == root_y:
            return

        # Ties attach x's root under y's root.
        if self.size[root_x] <= self.size[root_y]:
            self.parent[root_x] = root_y
            self.size[root_y] += self.size[root_x]
        else:
            self.parent[root_y] = root_x
            self.size[root_x] += self.size[root_y]
        self._count -= 1


# ---------------------------------------------------------------------------
# Naive quick-find
# ---------------------------------------------------------------------------


class NaiveUnionFind(ConnectivityEngine):
    """Label-array union-find: O(1) find, full O(N) relabel scan per union."""

    kind = EngineKind.NAIVE

    def __init__(self, size: int) -> None:
        super().__init__(size)
        self.id: np.ndarray = np.arange(self._size, dtype=np.int64)

    def find(self, x: int) -> int:
        self._validate(x)
        return int(self.id[x])

    def union(self, x: int, y: int) -> None:
        id_x = self.find(x)
        id_y = self.find(y)
        if id_x == id_y:
            return

        # Every label is visited, not just the members of x's component.
        self.id[self.id == id_x] = id_y
        self._count -= 1


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


_ENGINES: dict[EngineKind, type[ConnectivityEngine]] = {
    EngineKind.WEIGHTED: WeightedUnionFind,
    EngineKind.NAIVE: NaiveUnionFind,
}


def make_engine(kind: str | EngineKind, size: int) -> ConnectivityEngine:
    """Construct a fresh engine of the requested kind over ``size`` nodes.

    Parameters
    ----------
    kind : str or EngineKind
        ``"weighted"`` or ``"naive"`` (or the enum member).
    size : int
        Number of nodes, including any virtual sentinels.

    Returns
    -------
    ConnectivityEngine
        A new engine in which every node is its own component.

    Raises
    ------
    ValueError
        If ``kind`` is unknown or ``size <= 0``.
    """
    return _ENGINES[EngineKind.parse(kind)](size)

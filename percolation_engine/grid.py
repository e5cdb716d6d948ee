"""
n-by-n site percolation grid.

Sites are addressed by ``(row, col)`` with 0-based coordinates and stored
linearly as ``row * n + col``.  Two virtual sentinel nodes sit past the end
of the lattice:

    n*n      virtual top     (joined to every open site in row 0)
    n*n + 1  virtual bottom  (joined to every open site in row n-1)

so "does an open path span the grid" is a single ``connected(top, bottom)``
query against the connectivity engine.  Sites only ever go blocked -> open.
"""

from __future__ import annotations

import numpy as np

from .union_find import ConnectivityEngine, EngineKind, make_engine


class PercolationGrid:
    """Open/query operations over an n×n lattice backed by a union-find engine.

    Parameters
    ----------
    n : int
        Side length of the grid.  Must be positive.
    engine : str or EngineKind, optional
        Union-find backing (default weighted quick-union).

    Raises
    ------
    ValueError
        If ``n <= 0`` or ``engine`` is unknown.
    """

    def __init__(self, n: int, engine: str | EngineKind = EngineKind.WEIGHTED) -> None:
        if n <= 0:
            raise ValueError(f"Grid size must be positive; got {n}.")
        kind = EngineKind.parse(engine)

        self._n = int(n)
        self._open = np.zeros(self._n * self._n, dtype=bool)
        self._open_count = 0
        self._virtual_top = self._n * self._n
        self._virtual_bottom = self._n * self._n + 1
        self._uf: ConnectivityEngine = make_engine(kind, self._n * self._n + 2)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def n(self) -> int:
        return self._n

    @property
    def engine_kind(self) -> EngineKind:
        return self._uf.kind

    @property
    def virtual_top(self) -> int:
        return self._virtual_top

    @property
    def virtual_bottom(self) -> int:
        return self._virtual_bottom

    def open_mask(self) -> np.ndarray:
        """Return a read-only (n, n) boolean copy of the open-site bitmap."""
        mask = self._open.reshape(self._n, self._n).copy()
        mask.setflags(write=False)
        return mask

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(self, row: int, col: int) -> None:
        if not (0 <= row < self._n and 0 <= col < self._n):
            raise ValueError(
                f"Site ({row}, {col}) out of bounds for {self._n}x{self._n} grid."
            )

    def _index(self, row: int, col: int) -> int:
        return row * self._n + col

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def open(self, row: int, col: int) -> None:
        """Open site (row, col) if it is not open already."""
        self._validate(row, col)
        index = self._index(row, col)
        if self._open[index]:
            return

        self._open[index] = True
        self._open_count += 1

        n = self._n
        if row == 0:
            self._uf.union(index, self._virtual_top)
        if row == n - 1:
            self._uf.union(index, self._virtual_bottom)

        # up, down, left, right
        if row > 0 and self._open[index - n]:
            self._uf.union(index, index - n)
        if row < n - 1 and self._open[index + n]:
            self._uf.union(index, index + n)
        if col > 0 and self._open[index - 1]:
            self._uf.union(index, index - 1)
        if col < n - 1 and self._open[index + 1]:
            self._uf.union(index, index + 1)

    def is_open(self, row: int, col: int) -> bool:
        self._validate(row, col)
        return bool(self._open[self._index(row, col)])

    def is_full(self, row: int, col: int) -> bool:
        """True iff the site is open and connected to the top row.

        Once the grid percolates, bottom-row sites may report full through the
        shared bottom sentinel even without their own path to the top.
        """
        self._validate(row, col)
        index = self._index(row, col)
        if not self._open[index]:
            return False
        return self._uf.connected(index, self._virtual_top)

    def number_of_open_sites(self) -> int:
        return self._open_count

    def percolates(self) -> bool:
        return self._uf.connected(self._virtual_top, self._virtual_bottom)

    def __repr__(self) -> str:
        return (
            f"PercolationGrid(n={self._n}, engine={self._uf.kind.value!r}, "
            f"open={self._open_count})"
        )

"""Contact graph representation.

Provides an immutable adjacency representation of a residue contact
map: dense boolean adjacency matrix, per-node neighbor lists and degree
sequence.
"""

from typing import Iterable, Optional

import numpy as np
from scipy.spatial.distance import cdist


class ContactGraph:
    """Immutable undirected contact graph over integer-indexed nodes."""

    def __init__(self, adjacency: np.ndarray, name: str = "NoName"):
        """Initialize the contact graph.

        Args:
            adjacency: Square symmetric matrix, nonzero entries are contacts.
            name: Identifier used in reports.

        Raises:
            ValueError: If the matrix is not square or not symmetric.
        """
        adjacency = np.array(adjacency, dtype=bool)
        if adjacency.ndim != 2 or adjacency.shape[0] != adjacency.shape[1]:
            raise ValueError(
                f"Adjacency matrix must be square, got shape {adjacency.shape}"
            )
        if not np.array_equal(adjacency, adjacency.T):
            raise ValueError("Adjacency matrix must be symmetric")

        # Self-contacts carry no information for matching
        np.fill_diagonal(adjacency, False)
        adjacency.setflags(write=False)

        self.name = name
        self._adjacency = adjacency
        self._adjacency_list = tuple(
            np.flatnonzero(row) for row in adjacency
        )
        degree = np.array([len(nbrs) for nbrs in self._adjacency_list], dtype=int)
        degree.setflags(write=False)
        self._degree = degree

    @classmethod
    def from_contacts(
        cls,
        n_nodes: int,
        contacts: Iterable[tuple[int, int]],
        name: str = "NoName",
    ) -> "ContactGraph":
        """Build a graph from a list of contacting node pairs.

        Args:
            n_nodes: Number of nodes.
            contacts: (i, j) pairs; each is stored in both directions.
            name: Identifier used in reports.

        Returns:
            ContactGraph instance.
        """
        if n_nodes < 0:
            raise ValueError(f"Number of nodes must be non-negative, got {n_nodes}")

        adjacency = np.zeros((n_nodes, n_nodes), dtype=bool)
        for i, j in contacts:
            if not (0 <= i < n_nodes and 0 <= j < n_nodes):
                raise ValueError(
                    f"Contact ({i}, {j}) out of range for {n_nodes} nodes"
                )
            adjacency[i, j] = True
            adjacency[j, i] = True

        return cls(adjacency, name=name)

    @classmethod
    def from_contact_map(
        cls,
        contact_map: np.ndarray,
        name: str = "NoName",
    ) -> "ContactGraph":
        """Build a graph from a dense (possibly one-sided) contact map.

        The map is symmetrized, so a map holding only the upper triangle
        is accepted.
        """
        contact_map = np.asarray(contact_map) > 0
        return cls(contact_map | contact_map.T, name=name)

    @classmethod
    def from_coordinates(
        cls,
        coords: np.ndarray,
        cutoff: float = 8.0,
        min_seq_sep: int = 1,
        name: str = "NoName",
    ) -> "ContactGraph":
        """Build a graph from point coordinates with a distance cutoff.

        Args:
            coords: Coordinate array, shape (n, 3).
            cutoff: Distance cutoff for defining contacts.
            min_seq_sep: Minimum index separation |i - j| for a contact.
            name: Identifier used in reports.

        Returns:
            ContactGraph instance.
        """
        coords = np.asarray(coords, dtype=float)
        n = len(coords)
        if n == 0:
            return cls(np.zeros((0, 0), dtype=bool), name=name)

        dm = cdist(coords, coords)
        contact_map = dm < cutoff

        idx = np.arange(n)
        contact_map &= np.abs(idx[:, None] - idx[None, :]) >= min_seq_sep

        return cls(contact_map, name=name)

    @property
    def adjacency(self) -> np.ndarray:
        """Read-only boolean adjacency matrix."""
        return self._adjacency

    @property
    def adjacency_list(self) -> tuple[np.ndarray, ...]:
        """Ascending neighbor indices per node."""
        return self._adjacency_list

    @property
    def degree(self) -> np.ndarray:
        """Degree sequence."""
        return self._degree

    @property
    def n_nodes(self) -> int:
        """Number of nodes."""
        return self._adjacency.shape[0]

    @property
    def n_edges(self) -> int:
        """Number of undirected contacts."""
        return int(self._degree.sum()) // 2

    def __len__(self) -> int:
        return self.n_nodes

    def __repr__(self) -> str:
        return (
            f"ContactGraph(name={self.name!r}, n_nodes={self.n_nodes}, "
            f"n_edges={self.n_edges})"
        )

    def neighbors(self, i: int) -> np.ndarray:
        """Neighbors of node i."""
        return self._adjacency_list[i]

    def has_contact(self, i: int, j: int) -> bool:
        return bool(self._adjacency[i, j])

    def contacts(self, min_seq_sep: int = 1) -> list[tuple[int, int]]:
        """Get list of contacting node pairs (i < j).

        Args:
            min_seq_sep: Minimum index separation to report.

        Returns:
            List of (i, j) pairs.
        """
        rows, cols = np.nonzero(np.triu(self._adjacency, k=max(min_seq_sep, 1)))
        return [(int(i), int(j)) for i, j in zip(rows, cols)]

    def directed_edges(self) -> tuple[np.ndarray, np.ndarray]:
        """Both orientations of every contact as (source, target) arrays."""
        src, dst = np.nonzero(self._adjacency)
        return src, dst

    def density(self) -> float:
        """Fraction of possible contacts that are present."""
        n = self.n_nodes
        max_contacts = n * (n - 1) // 2
        if max_contacts == 0:
            return 0.0
        return self.n_edges / max_contacts

    def contact_order(self) -> float:
        """Calculate relative contact order.

        Contact order = (1/(L*N)) * sum |i - j| over contacts,
        where L is the number of contacts and N the number of nodes.
        """
        if self.n_edges == 0:
            return 0.0
        rows, cols = np.nonzero(np.triu(self._adjacency, k=1))
        return float(np.sum(cols - rows)) / (self.n_edges * self.n_nodes)

    def copy(self, name: Optional[str] = None) -> "ContactGraph":
        """Return an equal graph, optionally renamed."""
        return ContactGraph(self._adjacency, name=name or self.name)

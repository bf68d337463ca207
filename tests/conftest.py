"""Shared test fixtures and utilities for contact_match tests."""

from pathlib import Path

import numpy as np
import pytest

from contact_match.core.graph import ContactGraph


def path_graph(n: int, name: str = "path") -> ContactGraph:
    """Chain 0-1-...-(n-1)."""
    return ContactGraph.from_contacts(n, [(i, i + 1) for i in range(n - 1)], name=name)


def triangle(name: str = "triangle") -> ContactGraph:
    return ContactGraph.from_contacts(3, [(0, 1), (1, 2), (0, 2)], name=name)


def random_contact_graph(
    n: int,
    density: float,
    seed: int,
    name: str = "random",
) -> ContactGraph:
    """Random symmetric contact graph."""
    rng = np.random.default_rng(seed)
    upper = np.triu(rng.random((n, n)) < density, k=1)
    return ContactGraph(upper | upper.T, name=name)


def write_graph_file(path: Path, n_nodes: int, contacts: list[tuple[int, int]]) -> Path:
    lines = [str(n_nodes)] + [f"{i} {j} 1 1" for i, j in contacts]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def hairpin() -> ContactGraph:
    """Two antiparallel strands joined by a turn."""
    contacts = [(0, 1), (1, 2), (2, 3), (3, 4), (4, 5), (5, 6), (6, 7),
                (0, 7), (1, 6), (2, 5)]
    return ContactGraph.from_contacts(8, contacts, name="hairpin")


@pytest.fixture
def graph_files(tmp_path: Path) -> list[Path]:
    """Three small contact graph files."""
    return [
        write_graph_file(tmp_path / "a.cm", 6, [(0, 3), (1, 4), (2, 5), (0, 1)]),
        write_graph_file(tmp_path / "b.cm", 7, [(0, 3), (1, 4), (2, 5), (3, 6)]),
        write_graph_file(tmp_path / "c.cm", 5, [(0, 2), (1, 3), (2, 4)]),
    ]

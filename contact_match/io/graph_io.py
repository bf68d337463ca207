"""Contact graph file parsing and writing.

The plain-text format holds the number of nodes on the first line,
followed by one contact per line:

    <n>
    <i> <j> <u> <v>

i and j are node indices in 0..n-1, u and v are numeric contact
weights which are read but not used. Blank lines and lines starting
with '#' are ignored.
"""

from pathlib import Path
from typing import Iterable, Optional

import numpy as np

from contact_match.core.graph import ContactGraph

FIELDS_PER_CONTACT = 4


class GraphParseError(ValueError):
    """Raised when a contact graph file is malformed."""

    def __init__(self, message: str, source: str = "<input>", line_no: Optional[int] = None):
        self.source = source
        self.line_no = line_no
        location = f"{source}:{line_no}" if line_no is not None else source
        super().__init__(f"{location}: {message}")


def parse_contact_graph(
    lines: Iterable[str],
    name: str = "NoName",
    source: str = "<input>",
) -> ContactGraph:
    """Parse a contact graph from lines of text.

    Args:
        lines: Lines of the contact graph format.
        name: Name given to the resulting graph.
        source: Source label used in error messages.

    Returns:
        ContactGraph with symmetrized contacts.

    Raises:
        GraphParseError: On any malformed token, wrong field count, negative
            node count or out-of-range node index.
    """
    n_nodes = None
    adjacency = None

    for line_no, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        tokens = stripped.split()

        if n_nodes is None:
            if len(tokens) != 1:
                raise GraphParseError(
                    f"Expected the number of nodes, got {stripped!r}", source, line_no
                )
            n_nodes = _parse_int(tokens[0], source, line_no)
            if n_nodes < 0:
                raise GraphParseError(
                    f"Number of nodes must be non-negative, got {n_nodes}", source, line_no
                )
            adjacency = np.zeros((n_nodes, n_nodes), dtype=bool)
            continue

        if len(tokens) != FIELDS_PER_CONTACT:
            raise GraphParseError(
                f"Expected {FIELDS_PER_CONTACT} fields per contact, got {len(tokens)}",
                source,
                line_no,
            )

        i = _parse_int(tokens[0], source, line_no)
        j = _parse_int(tokens[1], source, line_no)
        for token in tokens[2:]:
            _parse_float(token, source, line_no)

        for idx in (i, j):
            if not 0 <= idx < n_nodes:
                raise GraphParseError(
                    f"Node index {idx} out of range for {n_nodes} nodes", source, line_no
                )

        adjacency[i, j] = True
        adjacency[j, i] = True

    if n_nodes is None:
        raise GraphParseError("Missing number of nodes", source)

    return ContactGraph(adjacency, name=name)


def load_contact_graph(path: str | Path, name: Optional[str] = None) -> ContactGraph:
    """Load a contact graph file.

    Args:
        path: Path to the contact graph file.
        name: Graph name; defaults to the file name without extensions.

    Returns:
        ContactGraph instance.

    Raises:
        FileNotFoundError: If the file does not exist.
        GraphParseError: If the file is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Contact graph file not found: {path}")

    if name is None:
        name = path.name.split(".")[0]

    with open(path) as f:
        return parse_contact_graph(f, name=name, source=str(path))


def write_contact_graph(graph: ContactGraph, path: str | Path) -> None:
    """Write a contact graph in the plain-text format.

    Contacts are written once (i < j) with unit weights.

    Args:
        graph: Contact graph to write.
        path: Output file path.
    """
    with open(path, "w") as f:
        f.write(f"{graph.n_nodes}\n")
        for i, j in graph.contacts():
            f.write(f"{i}\t{j}\t1\t1\n")


def _parse_int(token: str, source: str, line_no: int) -> int:
    try:
        return int(token)
    except ValueError:
        raise GraphParseError(f"Invalid integer {token!r}", source, line_no) from None


def _parse_float(token: str, source: str, line_no: int) -> float:
    try:
        return float(token)
    except ValueError:
        raise GraphParseError(f"Invalid number {token!r}", source, line_no) from None

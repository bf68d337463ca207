"""Contact Map Overlap by Softassign and Dynamic Programming.

Computes a near-optimal, order-preserving correspondence between the
nodes of two protein contact maps and scores the fraction of contacts
it preserves.
"""

__version__ = "0.1.0"
__author__ = "Contact Match"

from contact_match.core.graph import ContactGraph
from contact_match.core.engine import MatchEngine, SoftassignParams, AnnealingState
from contact_match.core.discretize import DiscretizationMethod, discretize
from contact_match.core.noncrossing import project_noncrossing
from contact_match.core.scoring import ScoreResult, evaluate
from contact_match.core.matcher import ContactMapMatcher, MatchResult, run
from contact_match.core.batch import BatchMatcher
from contact_match.io.graph_io import GraphParseError, load_contact_graph, write_contact_graph

__all__ = [
    "ContactGraph",
    "MatchEngine",
    "SoftassignParams",
    "AnnealingState",
    "DiscretizationMethod",
    "discretize",
    "project_noncrossing",
    "ScoreResult",
    "evaluate",
    "ContactMapMatcher",
    "MatchResult",
    "run",
    "BatchMatcher",
    "GraphParseError",
    "load_contact_graph",
    "write_contact_graph",
]

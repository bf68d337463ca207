import numpy as np
import pytest

from contact_match.core.discretize import DiscretizationMethod
from contact_match.core.engine import SoftassignParams
from contact_match.core.graph import ContactGraph
from contact_match.core.matcher import ContactMapMatcher, run
from contact_match.core.noncrossing import is_noncrossing

from conftest import path_graph, random_contact_graph


FAST = SoftassignParams(b0=0.5, bf=4.0, br=1.5)


def test_self_match_single_contact():
    graph = ContactGraph.from_contacts(2, [(0, 1)], name="pair")

    result = run(graph, graph.copy())

    assert result.feasible
    assert result.score == 1.0
    assert result.common_contacts == graph.n_edges
    assert result.matching == [(0, 0), (1, 1)]


def test_self_match_is_feasible_and_bounded(hairpin):
    result = run(hairpin, hairpin.copy())

    assert result.feasible
    assert 0.0 <= result.score <= 1.0
    assert 0 <= result.common_contacts <= hairpin.n_edges
    assert is_noncrossing(result.match_matrix)


def test_zero_edge_graph_scores_zero():
    empty = ContactGraph.from_contacts(4, [], name="empty")

    result = run(empty, path_graph(6), params=FAST)

    assert result.feasible
    assert result.score == 0.0
    assert result.common_contacts == 0


def test_larger_first_graph_reports_caller_order():
    graph_a = path_graph(6, name="a")
    graph_b = path_graph(4, name="b")

    result = run(graph_a, graph_b, params=FAST)

    assert result.swapped
    assert result.match_matrix.shape == (6, 4)
    assert (result.name_a, result.name_b) == ("a", "b")
    assert all(i < 6 and j < 4 for i, j in result.matching)
    assert is_noncrossing(result.match_matrix)


def test_smaller_first_graph_is_not_swapped():
    result = run(path_graph(3), path_graph(5), params=FAST)

    assert not result.swapped
    assert result.match_matrix.shape == (3, 5)


def test_equal_sizes_use_second_graph_as_rows():
    result = run(path_graph(4), path_graph(4), params=FAST)

    assert result.swapped


def test_match_is_deterministic(hairpin):
    other = random_contact_graph(10, 0.3, seed=4, name="other")
    matcher = ContactMapMatcher(params=FAST)

    first = matcher.match(hairpin, other)
    second = matcher.match(hairpin, other)

    assert np.array_equal(first.match_matrix, second.match_matrix)
    assert first.score == second.score
    assert first.common_contacts == second.common_contacts


@pytest.mark.parametrize("method", list(DiscretizationMethod))
def test_random_graphs_give_feasible_bounded_results(method):
    matcher = ContactMapMatcher(params=FAST, discretization=method)
    for seed in range(4):
        graph_a = random_contact_graph(8, 0.35, seed=seed)
        graph_b = random_contact_graph(11, 0.3, seed=seed + 50)

        result = matcher.match(graph_a, graph_b)

        assert result.feasible
        assert 0.0 <= result.score <= 1.0
        assert result.common_contacts >= 0
        assert result.n_matched <= 8
        assert is_noncrossing(result.match_matrix)


def test_result_bookkeeping():
    calls = []
    result = run(
        path_graph(3),
        path_graph(5),
        params=FAST,
        progress_callback=lambda step, total: calls.append(step),
    )

    assert result.iterations >= result.annealing_steps == FAST.annealing_steps()
    assert result.elapsed_time >= 0
    assert calls == list(range(1, FAST.annealing_steps() + 1))


def test_to_alignment_covers_both_graphs():
    result = run(path_graph(5), path_graph(7), params=FAST)

    aligned_a, aligned_b = result.to_alignment()

    assert len(aligned_a) == len(aligned_b)
    assert aligned_a.replace("-", "") == "X" * 5
    assert aligned_b.replace("-", "") == "X" * 7


def test_to_alignment_with_sequences():
    graph = ContactGraph.from_contacts(2, [(0, 1)])

    result = run(graph, graph.copy())

    assert result.to_alignment("AC", "GT") == ("AC", "GT")


def test_to_dict_keys():
    result = run(path_graph(3), path_graph(4), params=FAST)

    row = result.to_dict()

    assert set(row) == {
        "graph_1", "graph_2", "n_nodes_1", "n_nodes_2", "score",
        "common_contacts", "feasible", "n_matched", "iterations", "elapsed_time",
    }
    assert row["n_matched"] == result.n_matched

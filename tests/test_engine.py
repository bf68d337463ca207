import math

import numpy as np
import pytest

from contact_match.core.engine import (
    INITIAL_MATCH_VALUE,
    MatchEngine,
    SoftassignParams,
    sinkhorn_step,
)
from contact_match.core.graph import ContactGraph

from conftest import path_graph, random_contact_graph, triangle


FAST = SoftassignParams(b0=0.5, bf=4.0, br=1.5)


def test_default_params():
    params = SoftassignParams()

    assert (params.b0, params.bf, params.br) == (0.5, 10.0, 1.075)
    assert (params.i0, params.i1) == (4, 30)
    assert (params.eps0, params.eps1) == (0.5, 0.05)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"b0": 0.0},
        {"b0": 2.0, "bf": 1.0},
        {"br": 1.0},
        {"i0": 0},
        {"i1": 0},
        {"eps1": -0.1},
    ],
)
def test_invalid_params_raise(kwargs):
    with pytest.raises(ValueError):
        SoftassignParams(**kwargs)


def test_annealing_schedule_is_increasing_and_bounded():
    params = SoftassignParams()
    schedule = params.annealing_schedule()

    assert schedule[0] == params.b0
    assert all(b2 > b1 for b1, b2 in zip(schedule, schedule[1:]))
    assert schedule[-1] < params.bf
    assert schedule[-1] * params.br >= params.bf
    assert params.annealing_steps() <= math.ceil(
        math.log(params.bf / params.b0) / math.log(params.br)
    )
    assert params.annealing_steps() == params.max_annealing_steps() == 42


def test_sinkhorn_converges_to_doubly_stochastic():
    rng = np.random.default_rng(0)
    M = rng.random((5, 5)) + 0.1

    for _ in range(500):
        sinkhorn_step(M)

    assert np.allclose(M.sum(axis=0), 1.0)
    assert np.allclose(M.sum(axis=1), 1.0, atol=1e-6)


def test_sinkhorn_leaves_zero_rows_and_columns():
    M = np.array([
        [0.0, 0.0, 0.0],
        [0.0, 2.0, 2.0],
        [0.0, 1.0, 3.0],
    ])

    sinkhorn_step(M)

    assert np.all(np.isfinite(M))
    assert np.all(M[0] == 0.0)
    assert np.all(M[:, 0] == 0.0)
    assert np.allclose(M[:, 1:].sum(axis=0), 1.0)


def test_match_output_shape_and_state():
    graph_x = path_graph(4)
    graph_y = random_contact_graph(6, 0.4, seed=3)

    M, state = MatchEngine(FAST).match(graph_x, graph_y)

    assert M.shape == (5, 7)
    assert np.all(np.isfinite(M))
    assert np.all(M >= 0)
    assert state.n_annealing_steps == FAST.annealing_steps()
    assert state.b >= FAST.bf
    assert 1 <= state.n_iterations <= FAST.annealing_steps() * FAST.i0


def test_columns_are_normalized_after_run():
    graph = random_contact_graph(8, 0.4, seed=5)

    M, _ = MatchEngine(FAST).match(graph, graph.copy())

    assert np.allclose(M.sum(axis=0), 1.0)


def test_match_is_deterministic():
    graph_x = random_contact_graph(7, 0.4, seed=11)
    graph_y = random_contact_graph(9, 0.4, seed=12)
    engine = MatchEngine(FAST)

    M1, state1 = engine.match(graph_x, graph_y)
    M2, state2 = engine.match(graph_x, graph_y)

    assert np.array_equal(M1, M2)
    assert state1.n_iterations == state2.n_iterations


def test_self_match_prefers_diagonal_for_single_contact():
    graph = ContactGraph.from_contacts(2, [(0, 1)])

    M, _ = MatchEngine().match(graph, graph)

    assert M[0, 0] > M[0, 1]
    assert M[1, 1] > M[1, 0]


def test_zero_edge_graphs_stay_uniform():
    graph_x = ContactGraph.from_contacts(3, [])
    graph_y = ContactGraph.from_contacts(4, [])

    M, _ = MatchEngine(FAST).match(graph_x, graph_y)

    real = M[:3, :4]
    assert np.allclose(real, real[0, 0])


def test_empty_row_graph():
    graph_x = ContactGraph.from_contacts(0, [])

    M, state = MatchEngine(FAST).match(graph_x, triangle())

    assert M.shape == (1, 4)
    assert np.all(np.isfinite(M))
    assert state.n_annealing_steps == FAST.annealing_steps()


def test_row_graph_larger_than_column_graph_raises():
    with pytest.raises(ValueError, match="more nodes"):
        MatchEngine().match(path_graph(5), path_graph(3))


def test_progress_callback_reports_every_step():
    calls = []

    MatchEngine(FAST).match(
        path_graph(3),
        path_graph(4),
        progress_callback=lambda step, total: calls.append((step, total)),
    )

    total = FAST.annealing_steps()
    assert calls == [(step, total) for step in range(1, total + 1)]


def test_engine_does_not_keep_run_state():
    engine = MatchEngine(FAST)
    engine.match(path_graph(3), path_graph(4))

    assert not hasattr(engine, "M")
    assert engine.params is FAST
    assert INITIAL_MATCH_VALUE == 0.1

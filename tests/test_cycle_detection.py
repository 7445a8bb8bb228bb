import pytest

from taskweave.cycle_detection import CycleDetectionResult, CycleDetector


def _edges_form_cycle(detector_edges, cycle):
    pairs = zip(cycle, cycle[1:] + cycle[:1])
    return all(pair in detector_edges for pair in pairs)


def test_no_cycle():
    detector = CycleDetector()
    detector.add_dependency(1, 2)
    detector.add_dependency(2, 3)

    result = detector.detect_cycle()
    assert not result.has_cycle()
    assert result.cycle_path() is None


def test_simple_cycle():
    detector = CycleDetector()
    edges = [(1, 2), (2, 3), (3, 1)]
    for a, b in edges:
        detector.add_dependency(a, b)

    result = detector.detect_cycle()
    assert result.has_cycle()
    cycle = result.cycle_path()
    assert cycle
    assert sorted(cycle) == [1, 2, 3]
    assert _edges_form_cycle(set(edges), cycle)


def test_self_loop():
    detector = CycleDetector()
    detector.add_dependency(1, 1)

    result = detector.detect_cycle()
    assert result.has_cycle()
    assert result.cycle_path() == [1]


def test_complex_graph_no_cycle():
    detector = CycleDetector()
    detector.add_dependency(1, 2)
    detector.add_dependency(1, 3)
    detector.add_dependency(2, 4)
    detector.add_dependency(3, 4)

    assert not detector.detect_cycle().has_cycle()


def test_cycle_inside_larger_graph():
    detector = CycleDetector()
    edges = [(0, 1), (1, 2), (2, 3), (3, 1), (3, 4)]
    for a, b in edges:
        detector.add_dependency(a, b)

    cycle = detector.detect_cycle().cycle_path()
    assert sorted(cycle) == [1, 2, 3]
    assert _edges_form_cycle(set(edges), cycle)


def test_topological_sort():
    detector = CycleDetector()
    detector.add_dependency(1, 2)
    detector.add_dependency(2, 3)
    detector.add_dependency(1, 3)

    ordered = detector.topological_sort()
    assert ordered is not None
    assert len(ordered) == 3
    assert ordered.index(1) < ordered.index(2) < ordered.index(3)


def test_topological_sort_with_cycle():
    detector = CycleDetector()
    detector.add_dependency(1, 2)
    detector.add_dependency(2, 3)
    detector.add_dependency(3, 1)

    assert detector.topological_sort() is None


def test_topological_sort_includes_isolated_tasks():
    detector = CycleDetector()
    detector.add_task("lonely")
    detector.add_dependency("a", "b")

    ordered = detector.topological_sort()
    assert sorted(ordered) == ["a", "b", "lonely"]
    assert ordered.index("a") < ordered.index("b")


def test_add_task_twice_keeps_single_node():
    detector = CycleDetector()
    detector.add_task(7)
    detector.add_task(7)
    assert detector.topological_sort() == [7]


def test_scc_of_cycle():
    detector = CycleDetector()
    detector.add_dependency(1, 2)
    detector.add_dependency(2, 3)
    detector.add_dependency(3, 1)

    components = detector.strongly_connected_components()
    assert len(components) == 1
    assert sorted(components[0]) == [1, 2, 3]


def test_scc_of_dag_is_empty():
    detector = CycleDetector()
    detector.add_dependency(1, 2)
    detector.add_dependency(2, 3)

    assert detector.strongly_connected_components() == []


def test_scc_self_loop():
    detector = CycleDetector()
    detector.add_dependency(5, 5)
    detector.add_dependency(5, 6)

    assert detector.strongly_connected_components() == [[5]]


def test_scc_two_separate_cycles():
    detector = CycleDetector()
    for a, b in [(1, 2), (2, 1), (2, 3), (3, 4), (4, 5), (5, 3)]:
        detector.add_dependency(a, b)

    components = sorted(sorted(c) for c in detector.strongly_connected_components())
    assert components == [[1, 2], [3, 4, 5]]


def test_long_chain_does_not_hit_recursion_limit():
    detector = CycleDetector()
    for i in range(5000):
        detector.add_dependency(i, i + 1)

    assert not detector.detect_cycle().has_cycle()
    assert detector.topological_sort() == list(range(5001))
    assert detector.strongly_connected_components() == []


@pytest.mark.parametrize("cycle", [None, (1, 2)])
def test_result_consistency(cycle):
    result = CycleDetectionResult(cycle)
    assert result.has_cycle() == (cycle is not None)
    assert result.cycle_path() == (None if cycle is None else list(cycle))
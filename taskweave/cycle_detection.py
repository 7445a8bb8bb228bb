"""Cycle detection, topological ordering and strongly connected components for task graphs."""

from __future__ import annotations

from collections import deque
from collections.abc import Hashable, Iterator
from dataclasses import dataclass

TaskId = Hashable


@dataclass(frozen=True)
class CycleDetectionResult:
    """Outcome of a cycle search: either no cycle or the path of one cycle."""

    cycle: tuple[TaskId, ...] | None = None

    def has_cycle(self) -> bool:
        """Return True if a cycle was found."""
        return self.cycle is not None

    def cycle_path(self) -> list[TaskId] | None:
        """Return the task ids forming the cycle, or None if the graph is acyclic."""
        return None if self.cycle is None else list(self.cycle)


class CycleDetector:
    """Directed task graph that can be checked for cycles."""

    def __init__(self) -> None:
        # Dict keys keep insertion order, which makes every traversal deterministic.
        self._adjacency: dict[TaskId, list[TaskId]] = {}

    def add_task(self, task_id: TaskId) -> None:
        """Add a task to the graph; adding an existing task is a no-op."""
        self._adjacency.setdefault(task_id, [])

    def add_dependency(self, source: TaskId, target: TaskId) -> None:
        """Add the edge ``source -> target``, adding both tasks if needed."""
        self.add_task(source)
        self.add_task(target)
        self._adjacency[source].append(target)

    def detect_cycle(self) -> CycleDetectionResult:
        """Search the graph depth-first and report the first cycle found."""
        visited: set[TaskId] = set()

        for root in self._adjacency:
            if root in visited:
                continue
            path: list[TaskId] = [root]
            on_path: set[TaskId] = {root}
            visited.add(root)
            stack: list[Iterator[TaskId]] = [iter(self._adjacency[root])]

            while stack:
                for successor in stack[-1]:
                    if successor not in visited:
                        visited.add(successor)
                        on_path.add(successor)
                        path.append(successor)
                        stack.append(iter(self._adjacency[successor]))
                        break
                    if successor in on_path:
                        start = path.index(successor)
                        return CycleDetectionResult(tuple(path[start + 1:]) + (successor,))
                else:
                    stack.pop()
                    on_path.discard(path.pop())

        return CycleDetectionResult()

    def topological_sort(self) -> list[TaskId] | None:
        """Return the tasks in dependency order, or None if the graph has a cycle."""
        if self.detect_cycle().has_cycle():
            return None

        in_degree = dict.fromkeys(self._adjacency, 0)
        for successors in self._adjacency.values():
            for successor in successors:
                in_degree[successor] += 1

        queue = deque(task for task, degree in in_degree.items() if degree == 0)
        ordered: list[TaskId] = []
        while queue:
            node = queue.popleft()
            ordered.append(node)
            for successor in self._adjacency[node]:
                in_degree[successor] -= 1
                if in_degree[successor] == 0:
                    queue.append(successor)

        return ordered if len(ordered) == len(self._adjacency) else None

    def strongly_connected_components(self) -> list[list[TaskId]]:
        """Return the cyclic strongly connected components (Tarjan's algorithm).

        Single tasks are reported only when they have a self-loop.
        """
        counter = 0
        index: dict[TaskId, int] = {}
        lowlink: dict[TaskId, int] = {}
        scc_stack: list[TaskId] = []
        on_stack: set[TaskId] = set()
        components: list[list[TaskId]] = []

        def visit(node: TaskId) -> None:
            nonlocal counter
            index[node] = lowlink[node] = counter
            counter += 1
            scc_stack.append(node)
            on_stack.add(node)

        for root in self._adjacency:
            if root in index:
                continue
            visit(root)
            work: list[tuple[TaskId, Iterator[TaskId]]] = [(root, iter(self._adjacency[root]))]

            while work:
                node, successors = work[-1]
                for successor in successors:
                    if successor not in index:
                        visit(successor)
                        work.append((successor, iter(self._adjacency[successor])))
                        break
                    if successor in on_stack:
                        lowlink[node] = min(lowlink[node], index[successor])
                else:
                    work.pop()
                    if work:
                        parent = work[-1][0]
                        lowlink[parent] = min(lowlink[parent], lowlink[node])
                    if lowlink[node] == index[node]:
                        component: list[TaskId] = []
                        while True:
                            member = scc_stack.pop()
                            on_stack.discard(member)
                            component.append(member)
                            if member == node:
                                break
                        if len(component) > 1 or self._has_self_loop(node):
                            components.append(component)

        return components

    def _has_self_loop(self, node: TaskId) -> bool:
        return node in self._adjacency.get(node, ())
"""Graph algorithms for asmdeps."""

from __future__ import annotations


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.counter = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []

    def visit(self, node: str) -> None:
        self.indices[node] = self.counter
        self.low_link[node] = self.counter
        self.counter += 1
        self.stack.append(node)
        self.on_stack.add(node)

    def pop_component(self, root: str) -> list[str]:
        component: list[str] = []
        while True:
            member = self.stack.pop()
            self.on_stack.discard(member)
            component.append(member)
            if member == root:
                return component


def _strongconnect(start: str, graph: dict[str, set[str]], state: _TarjanState) -> None:
    """Run Tarjan's algorithm from one start node without recursion.

    Module graphs can be deep; an explicit work stack of
    (node, remaining successors) keeps Python's recursion limit out of play.
    """
    state.visit(start)
    work: list[tuple[str, list[str]]] = [(start, sorted(graph.get(start, ())))]

    while work:
        node, successors = work[-1]
        if successors:
            successor = successors.pop(0)
            if successor not in state.indices:
                state.visit(successor)
                work.append((successor, sorted(graph.get(successor, ()))))
            elif successor in state.on_stack:
                state.low_link[node] = min(
                    state.low_link[node], state.indices[successor]
                )
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[node])

        if state.low_link[node] == state.indices[node]:
            component = state.pop_component(node)
            if len(component) > 1 or node in graph.get(node, ()):
                state.sccs.append(component)


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find dependency cycles in a directed graph using Tarjan's algorithm.

    Args:
        graph: Adjacency map of node -> successor nodes

    Returns:
        Strongly connected components that contain a cycle (more than one
        node, or a single node with a self edge). Each component is sorted
        and the list of components is sorted, so output is deterministic.
    """
    state = _TarjanState()

    for node in sorted(graph):
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return sorted(sorted(component) for component in state.sccs)


__all__ = ["_TarjanState", "_strongconnect", "find_cycles"]

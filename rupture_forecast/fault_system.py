"""Fault systems made of connected faults.

A fault system is a set of faults, each split into sections, joined end to
end along strike. Connections form a directed graph from one fault to the
next. A system that bifurcates, such as a central fault continuing onto
either of two branch faults, is forecast as a set of linear paths through
the graph, one per branch:

    centre ──> east
          └──> branch

gives the paths [centre, east] and [centre, branch].
"""

import dataclasses
import itertools

import networkx as nx

from rupture_forecast.errors import ConsistencyError
from rupture_forecast.sections import SectionGeometry


@dataclasses.dataclass
class FaultSystem:
    """A set of faults connected along strike.

    Attributes
    ----------
    name : str
        The name of the fault system.
    faults : dict[str, list[SectionGeometry]]
        The sections of each fault, in order along strike.
    connections : list[tuple[str, str]]
        Pairs (a, b) meaning the last section of fault a is followed by
        the first section of fault b.
    """

    name: str
    faults: dict[str, list[SectionGeometry]]
    connections: list[tuple[str, str]] = dataclasses.field(default_factory=list)
    graph: nx.DiGraph = dataclasses.field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate the fault system and build its connection graph.

        Raises
        ------
        ValueError
            If a fault has no sections, a connection names an unknown fault,
            or the connections form a cycle.
        ConsistencyError
            If a section index appears more than once in the system.
        """
        for fault_name, sections in self.faults.items():
            if not sections:
                raise ValueError(f"Fault {fault_name} has no sections.")

        indices = [section.index for section in self.sections]
        if len(set(indices)) != len(indices):
            raise ConsistencyError(
                f"Section indices in fault system {self.name} are not unique."
            )

        self.graph = nx.DiGraph()
        self.graph.add_nodes_from(self.faults)
        for fault_a, fault_b in self.connections:
            unknown = {fault_a, fault_b} - set(self.faults)
            if unknown:
                raise ValueError(f"Connection names unknown fault(s): {sorted(unknown)}.")
            self.graph.add_edge(fault_a, fault_b)

        if not nx.is_directed_acyclic_graph(self.graph):
            raise ValueError(f"Connections in fault system {self.name} form a cycle.")

    @property
    def sections(self) -> list[SectionGeometry]:  # numpydoc ignore=RT01
        """list[SectionGeometry]: Every section in the system."""
        return list(itertools.chain.from_iterable(self.faults.values()))

    def paths(self) -> list[list[str]]:
        """Find every linear path through the system.

        Returns
        -------
        list[list[str]]
            The fault names of each path from a fault with no predecessor to
            a fault with no successor, in fault insertion order.
        """
        roots = [node for node in self.graph.nodes if self.graph.in_degree(node) == 0]
        leaves = [node for node in self.graph.nodes if self.graph.out_degree(node) == 0]
        paths = []
        for root in roots:
            for leaf in leaves:
                if root == leaf:
                    paths.append([root])
                else:
                    paths.extend(
                        list(path) for path in nx.all_simple_paths(self.graph, root, leaf)
                    )
        return paths

    def path_sections(self, path: list[str]) -> list[SectionGeometry]:
        """The sections along a path, in order.

        Parameters
        ----------
        path : list[str]
            Fault names along the path.

        Returns
        -------
        list[SectionGeometry]
            The concatenated sections of each fault in the path.

        Raises
        ------
        ValueError
            If consecutive faults in the path are not connected.
        """
        for fault_a, fault_b in itertools.pairwise(path):
            if not self.graph.has_edge(fault_a, fault_b):
                raise ValueError(f"Fault {fault_a} does not connect to {fault_b}.")
        return list(
            itertools.chain.from_iterable(self.faults[fault] for fault in path)
        )

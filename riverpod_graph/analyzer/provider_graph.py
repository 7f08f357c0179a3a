"""Provider dependency graph.

One node per provider declaration and one per consumer widget, keyed by the
declaration identity (module + qualified name). Nodes are created on first
use and then only ever mutated in place: edges are appended in discovery
order, duplicates included.
"""
from typing import Dict, Iterator, List
import networkx as nx

from .symbols import Declaration


EDGE_KINDS = ('watch', 'listen', 'read')


class _DependantNode:
    """Common shape of provider and consumer nodes."""

    def __init__(self, definition: Declaration):
        self.definition = definition
        # All the providers this node is watching / listening to / reading.
        self.watch: List['ProviderNode'] = []
        self.listen: List['ProviderNode'] = []
        self.read: List['ProviderNode'] = []

    @property
    def identity(self) -> Declaration:
        return self.definition

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def enclosing_class_name(self) -> str:
        return ''

    @property
    def display_name(self) -> str:
        return self.name

    def add_edge(self, kind: str, target: 'ProviderNode'):
        """Record that this node accesses ``target`` through ``kind``.

        Raises:
            ValueError: If kind is not one of watch/listen/read
            TypeError: If target is not a ProviderNode
        """
        if kind not in EDGE_KINDS:
            raise ValueError(f"Unknown edge kind: {kind}")
        if not isinstance(target, ProviderNode):
            raise TypeError(f"Edges can only point at providers, got {type(target).__name__}")
        getattr(self, kind).append(target)

    def edges(self) -> Iterator[tuple]:
        """Yield (kind, target) pairs, grouped by kind."""
        for kind in EDGE_KINDS:
            for target in getattr(self, kind):
                yield kind, target

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.display_name!r})"


class ProviderNode(_DependantNode):
    """Stores the list of providers that the provider depends on."""

    @property
    def enclosing_class_name(self) -> str:
        return self.definition.class_name

    @property
    def display_name(self) -> str:
        """'Settings.theme' for class members, 'theme' otherwise."""
        if self.enclosing_class_name:
            return f"{self.enclosing_class_name}.{self.name}"
        return self.name


class ConsumerWidgetNode(_DependantNode):
    """Stores the list of providers that the consumer widget depends on."""


class ProviderGraph:
    """A dependency graph."""

    def __init__(self):
        self._providers: Dict[Declaration, ProviderNode] = {}
        self._consumer_widgets: Dict[Declaration, ConsumerWidgetNode] = {}

    @property
    def providers(self) -> List[ProviderNode]:
        return list(self._providers.values())

    @property
    def consumer_widgets(self) -> List[ConsumerWidgetNode]:
        return list(self._consumer_widgets.values())

    def provider_node(self, definition: Declaration) -> ProviderNode:
        """Gets the ProviderNode for the given declaration, creating it if needed."""
        node = self._providers.get(definition)
        if node is None:
            node = self._providers[definition] = ProviderNode(definition)
        return node

    def consumer_widget_node(self, definition: Declaration) -> ConsumerWidgetNode:
        """Gets the ConsumerWidgetNode for the given declaration, creating it if needed."""
        node = self._consumer_widgets.get(definition)
        if node is None:
            node = self._consumer_widgets[definition] = ConsumerWidgetNode(definition)
        return node

    def edge_count(self) -> int:
        return sum(
            len(node.watch) + len(node.listen) + len(node.read)
            for node in [*self._providers.values(), *self._consumer_widgets.values()]
        )

    def to_networkx(self) -> nx.MultiDiGraph:
        """Export as a MultiDiGraph with edges going from dependency to dependant.

        Nodes are keyed by declaration identity ('module.qualified_name') and
        carry ``label`` (display name) and ``type`` ('provider' or 'consumer');
        edges carry ``kind``.
        """
        graph = nx.MultiDiGraph()

        for node in self._providers.values():
            graph.add_node(str(node.identity), label=node.display_name, type='provider')
        for node in self._consumer_widgets.values():
            graph.add_node(str(node.identity), label=node.display_name, type='consumer')

        for node in [*self._providers.values(), *self._consumer_widgets.values()]:
            for kind, target in node.edges():
                graph.add_edge(str(target.identity), str(node.identity), kind=kind)

        return graph

    def find_cycles(self) -> List[List[str]]:
        """Provider dependency cycles, as lists of display names.

        Consumers never take part in a cycle since nothing depends on them.
        """
        graph = nx.DiGraph(self.to_networkx())
        labels = nx.get_node_attributes(graph, 'label')
        return [[labels[key] for key in cycle] for cycle in nx.simple_cycles(graph)]

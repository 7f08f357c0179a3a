"""Tests for ProviderGraph nodes, edges and the networkx export."""

import networkx as nx
import pytest

from riverpod_graph.analyzer.provider_graph import ConsumerWidgetNode, ProviderGraph, ProviderNode
from riverpod_graph.analyzer.symbols import Declaration, DeclarationKind


def declaration(qualified_name, kind=DeclarationKind.VARIABLE, module='app'):
    name = qualified_name.rsplit('.', 1)[-1]
    class_name = qualified_name.rsplit('.', 1)[0] if '.' in qualified_name else ''
    return Declaration(module, qualified_name, kind, name=name, class_name=class_name)


@pytest.fixture
def graph():
    return ProviderGraph()


class TestNodes:
    """Get-or-create semantics of graph nodes."""

    def test_provider_node_is_unique_per_declaration(self, graph):
        first = graph.provider_node(declaration('counter'))
        second = graph.provider_node(declaration('counter'))

        assert first is second
        assert graph.providers == [first]

    def test_same_name_in_other_module_is_another_node(self, graph):
        here = graph.provider_node(declaration('counter'))
        there = graph.provider_node(declaration('counter', module='other'))

        assert here is not there
        assert len(graph.providers) == 2

    def test_display_names(self, graph):
        top = graph.provider_node(declaration('theme'))
        member = graph.provider_node(declaration('Settings.theme'))
        widget = graph.consumer_widget_node(declaration('Home', DeclarationKind.CLASS))

        assert top.display_name == 'theme'
        assert member.display_name == 'Settings.theme'
        assert member.name == 'theme'
        assert member.enclosing_class_name == 'Settings'
        assert widget.display_name == 'Home'
        assert widget.enclosing_class_name == ''
        assert repr(member) == "ProviderNode('Settings.theme')"

    def test_providers_and_consumers_are_separate(self, graph):
        graph.provider_node(declaration('Home'))
        graph.consumer_widget_node(declaration('Home', DeclarationKind.CLASS))

        assert isinstance(graph.providers[0], ProviderNode)
        assert isinstance(graph.consumer_widgets[0], ConsumerWidgetNode)


class TestEdges:
    """Edge recording on nodes."""

    def test_edges_keep_order_and_duplicates(self, graph):
        source = graph.provider_node(declaration('total'))
        a = graph.provider_node(declaration('a'))
        b = graph.provider_node(declaration('b'))

        source.add_edge('watch', a)
        source.add_edge('read', b)
        source.add_edge('watch', a)
        source.add_edge('listen', b)

        assert source.watch == [a, a]
        assert source.read == [b]
        assert source.listen == [b]
        assert list(source.edges()) == [('watch', a), ('watch', a), ('listen', b), ('read', b)]
        assert graph.edge_count() == 4

    def test_unknown_kind(self, graph):
        node = graph.provider_node(declaration('a'))

        with pytest.raises(ValueError):
            node.add_edge('subscribe', graph.provider_node(declaration('b')))

    def test_consumer_cannot_be_a_target(self, graph):
        node = graph.provider_node(declaration('a'))
        widget = graph.consumer_widget_node(declaration('Home', DeclarationKind.CLASS))

        with pytest.raises(TypeError):
            node.add_edge('watch', widget)
        assert node.watch == []


class TestNetworkxExport:
    """Conversion to networkx and cycle detection."""

    def test_to_networkx(self, graph):
        counter = graph.provider_node(declaration('counter'))
        doubled = graph.provider_node(declaration('Math.doubled'))
        home = graph.consumer_widget_node(declaration('Home', DeclarationKind.CLASS))
        doubled.add_edge('watch', counter)
        home.add_edge('watch', doubled)
        home.add_edge('watch', doubled)

        exported = graph.to_networkx()

        assert isinstance(exported, nx.MultiDiGraph)
        assert exported.nodes['app.Math.doubled'] == {'label': 'Math.doubled', 'type': 'provider'}
        assert exported.nodes['app.Home']['type'] == 'consumer'
        assert exported.number_of_edges('app.counter', 'app.Math.doubled') == 1
        assert exported.number_of_edges('app.Math.doubled', 'app.Home') == 2
        assert nx.is_directed_acyclic_graph(exported)

    def test_find_cycles(self, graph):
        a = graph.provider_node(declaration('a'))
        b = graph.provider_node(declaration('b'))
        c = graph.provider_node(declaration('c'))
        a.add_edge('watch', b)
        b.add_edge('read', a)
        c.add_edge('watch', a)

        cycles = graph.find_cycles()

        assert len(cycles) == 1
        assert sorted(cycles[0]) == ['a', 'b']

    def test_no_cycles(self, graph):
        a = graph.provider_node(declaration('a'))
        a.add_edge('watch', graph.provider_node(declaration('b')))

        assert graph.find_cycles() == []

    def test_self_dependency_is_a_cycle(self, graph):
        a = graph.provider_node(declaration('a'))
        a.add_edge('read', a)

        assert graph.find_cycles() == [['a']]

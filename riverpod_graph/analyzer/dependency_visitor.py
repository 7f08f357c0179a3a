"""Visitors collecting the providers read, watched or listened to by an entity."""
from typing import Callable, Optional, Tuple, Union
from tree_sitter import Node

from .provider_graph import EDGE_KINDS, ConsumerWidgetNode, ProviderGraph, ProviderNode
from .reference_resolver import ProviderReferenceResolver
from .resolver import SourceUnit, SymbolResolver
from .symbols import Declaration, DeclarationKind, ExternalSymbol
from .syntax import FUNCTION_SCOPES, decorator_names, node_text, positional_arguments, unwrap_callee, unwrap_parentheses


# (unit, node) to walk; None when there is nothing to walk
Body = Optional[Tuple[SourceUnit, Node]]

DependantNode = Union[ProviderNode, ConsumerWidgetNode]


class _AccessCallVisitor:
    """Walks a syntax tree and records every ``ref.watch/listen/read(provider)``.

    Calls are handled in post-order, so an access call nested in the
    arguments of another one is recorded first. ``dependant`` returns the
    node receiving the edges; it is only called once an edge is found.
    """

    def __init__(self, resolver: SymbolResolver, graph: ProviderGraph,
                 dependant: Callable[[], DependantNode],
                 reference_resolver: Optional[ProviderReferenceResolver] = None):
        self.resolver = resolver
        self.graph = graph
        self.dependant = dependant
        self.reference_resolver = reference_resolver or ProviderReferenceResolver(resolver)

    def visit(self, unit: SourceUnit, node: Node):
        for child in node.children:
            self.visit(unit, child)

        if node.type == 'call':
            self._visit_call(unit, node)

    def _visit_call(self, unit: SourceUnit, node: Node):
        callee = unwrap_parentheses(node.child_by_field_name('function'))
        if callee is None or callee.type != 'attribute':
            return

        kind = node_text(callee.child_by_field_name('attribute'))
        if kind not in EDGE_KINDS:
            return

        receiver_type = self.resolver.expression_type(unit, callee.child_by_field_name('object'))
        if not self.resolver.is_from_framework(receiver_type):
            return

        arguments = positional_arguments(node.child_by_field_name('arguments'))
        if not arguments:
            return

        consumed = self.reference_resolver.resolve(unit, arguments[0])
        self._record(kind, consumed)

    def _record(self, kind: str, consumed: Declaration):
        self.dependant().add_edge(kind, self.graph.provider_node(consumed))


class ConsumerWidgetVisitor(_AccessCallVisitor):
    """Finds all the providers used by the given consumer widget."""

    def __init__(self, consumer: Declaration, resolver: SymbolResolver, graph: ProviderGraph,
                 reference_resolver: Optional[ProviderReferenceResolver] = None):
        super().__init__(resolver, graph, lambda: graph.consumer_widget_node(consumer), reference_resolver)
        self.consumer = consumer

    def run(self):
        self.visit(self.consumer.unit, self.consumer.node)


class ProviderDependencyVisitor(_AccessCallVisitor):
    """Finds all the providers used by the given provider.

    A provider whose callback is defined elsewhere is followed there, once:

        label = Provider(_label)            # body of the function _label
        counter = NotifierProvider(Counter)  # body of Counter.build
    """

    def __init__(self, provider: Declaration, resolver: SymbolResolver, graph: ProviderGraph,
                 reference_resolver: Optional[ProviderReferenceResolver] = None,
                 build_method: str = 'build'):
        super().__init__(resolver, graph, lambda: graph.provider_node(provider), reference_resolver)
        self.provider = provider
        self.build_method = build_method

    def run(self):
        body = self.defining_body()
        if body is not None:
            self.visit(*body)

    def defining_body(self) -> Body:
        """The syntax to walk for this provider.

        The provider's own declaration, unless its framework constructor gets
        a function or class defined elsewhere as first positional argument.
        """
        own = (self.provider.unit, self.provider.node)

        creation = self._framework_creation(self.provider.unit, self.provider.value)
        if creation is None:
            return own

        arguments = positional_arguments(creation.child_by_field_name('arguments'))
        if not arguments:
            return own

        first = unwrap_parentheses(arguments[0])
        if first.type not in ('identifier', 'attribute'):
            # Inline closure, the common case
            return own

        target = self.resolver.resolve_reference(self.provider.unit, first)
        if not isinstance(target, Declaration):
            return own

        if target.kind in (DeclarationKind.FUNCTION, DeclarationKind.METHOD):
            # Provider(my_function): its first parameter is the ref
            if target.kind == DeclarationKind.FUNCTION or 'staticmethod' in decorator_names(target.node):
                callee = self.resolver.resolve_reference(
                    self.provider.unit, unwrap_callee(creation.child_by_field_name('function'))
                )
                self.resolver.bind_callback(target, ExternalSymbol(callee.module, 'Ref'))
            return target.unit, _body_of(target.node)

        if target.kind == DeclarationKind.CLASS:
            # NotifierProvider(MyNotifier)
            build = self.resolver.class_method(target, self.build_method)
            if build is None:
                return None
            return build.unit, _body_of(build.node)

        return own

    def _framework_creation(self, unit: SourceUnit, node: Optional[Node]) -> Optional[Node]:
        """First framework call of an initializer, outside of nested closures."""
        if node is None or node.type in FUNCTION_SCOPES:
            return None

        if node.type == 'call':
            callee = self.resolver.resolve_reference(unit, unwrap_callee(node.child_by_field_name('function')))
            if self.resolver.is_from_framework(callee):
                return node

        for child in node.named_children:
            found = self._framework_creation(unit, child)
            if found is not None:
                return found
        return None


def _body_of(definition: Node) -> Node:
    """Body block of a def; parameters and decorators are not walked."""
    body = definition.child_by_field_name('body')
    return body if body is not None else definition

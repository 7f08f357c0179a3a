"""Recovers the provider declaration denoted by a watch/listen/read argument.

Supported argument shapes:

- ``ref.watch(provider)``                      bare identifier
- ``ref.watch(Settings.theme)``                qualified identifier
- ``ref.watch(providers.counter)``             provider through a module alias
- ``ref.watch(repository.items)``              member access on a value
- ``ref.watch(counter.notifier)``              provider then framework modifier
- ``ref.watch(family(42))``                    family invocation
- ``ref.watch(counter.select(lambda v: v))``   selector chain
- ``ref.watch(family(id).select(...))``        any combination of the above

Any other argument is rejected with UnsupportedExpressionError: dropping an
edge silently would leave a wrong graph behind.
"""
from enum import Enum
from tree_sitter import Node

from .resolver import SourceUnit, SymbolResolver
from .symbols import Declaration, ModuleSymbol
from .syntax import line_of, node_text, unwrap_parentheses


class ExpressionShape(Enum):
    """Expression kinds the resolver distinguishes."""
    MEMBER_ACCESS = 'member access'                # expr.name
    QUALIFIED_IDENTIFIER = 'qualified identifier'  # Name.name
    IDENTIFIER = 'identifier'                      # name
    CALL = 'call'                                  # family(id)
    METHOD_CALL = 'method call'                    # receiver.method(...)
    OTHER = 'other'


class UnsupportedExpressionError(ValueError):
    """A provider access argument that cannot be reduced to a provider."""

    def __init__(self, expression: Node, shape: ExpressionShape, unit: SourceUnit):
        self.expression_text = node_text(expression)
        self.shape = shape
        self.node_type = expression.type
        self.file_path = unit.path
        self.line_number = line_of(expression)
        super().__init__(
            f"unknown expression `{self.expression_text}` "
            f"({shape.value}, {self.node_type}) at {self.file_path}:{self.line_number}"
        )


class ProviderReferenceResolver:
    """Maps access-call arguments to the declaration of the provider they denote."""

    def __init__(self, resolver: SymbolResolver):
        self.resolver = resolver

    def shape_of(self, unit: SourceUnit, expression: Node) -> ExpressionShape:
        expression = unwrap_parentheses(expression)

        if expression.type == 'identifier':
            return ExpressionShape.IDENTIFIER

        if expression.type == 'attribute':
            target = unwrap_parentheses(expression.child_by_field_name('object'))
            if target is not None and target.type == 'identifier':
                return ExpressionShape.QUALIFIED_IDENTIFIER
            return ExpressionShape.MEMBER_ACCESS

        if expression.type == 'call':
            callee = unwrap_parentheses(expression.child_by_field_name('function'))
            if callee is not None and callee.type == 'attribute':
                # Settings.family(1) calls a stored provider, counter.select(f) calls a method
                if self._is_state_accessor(self.resolver.resolve_reference(unit, callee)):
                    return ExpressionShape.CALL
                return ExpressionShape.METHOD_CALL
            return ExpressionShape.CALL

        return ExpressionShape.OTHER

    def resolve(self, unit: SourceUnit, expression: Node) -> Declaration:
        """Returns the provider declaration of an access argument.

        Raises:
            UnsupportedExpressionError: If the expression does not denote a provider
        """
        expression = unwrap_parentheses(expression)
        shape = self.shape_of(unit, expression)

        if shape == ExpressionShape.MEMBER_ACCESS:
            # repository.items: a project-defined accessor reached through a value
            member = self.resolver.resolve_reference(unit, expression)
            if self._is_state_accessor(member) and not self.resolver.is_from_framework(member):
                return member
            # counter.notifier: the provider is the target
            return self.resolve(unit, expression.child_by_field_name('object'))

        if shape == ExpressionShape.QUALIFIED_IDENTIFIER:
            prefix = unwrap_parentheses(expression.child_by_field_name('object'))
            prefix_name = node_text(prefix)
            if prefix_name[:1].isupper() or isinstance(
                    self.resolver.resolve_reference(unit, prefix), ModuleSymbol):
                # Settings.theme / providers.counter
                member = self.resolver.resolve_reference(unit, expression)
                if self._is_state_accessor(member):
                    return member
            else:
                # catalog.items: a project attribute or property reached through a value
                member = self.resolver.resolve_reference(unit, expression)
                if self._is_state_accessor(member) and not self.resolver.is_from_framework(member):
                    return member
            # counter.notifier
            return self.resolve(unit, prefix)

        if shape == ExpressionShape.IDENTIFIER:
            declaration = self.resolver.resolve_reference(unit, expression)
            # s = Settings: a class alias is no provider
            if self._is_state_accessor(declaration) and self.resolver.alias_target(declaration) is None:
                return declaration

        elif shape == ExpressionShape.CALL:
            # family(id): the arguments carry no identity
            return self.resolve(unit, expression.child_by_field_name('function'))

        elif shape == ExpressionShape.METHOD_CALL:
            # counter.select(...): the method name carries no identity
            callee = unwrap_parentheses(expression.child_by_field_name('function'))
            return self.resolve(unit, callee.child_by_field_name('object'))

        raise UnsupportedExpressionError(expression, shape, unit)

    @staticmethod
    def _is_state_accessor(symbol) -> bool:
        return isinstance(symbol, Declaration) and symbol.is_state_accessor

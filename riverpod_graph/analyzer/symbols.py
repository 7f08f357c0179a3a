"""Symbols produced by the semantic resolver.

A symbol is whatever an identifier or attribute chain can denote:

- ``Declaration``: a declaration inside the analyzed project. Its identity is
  the declaring module plus its qualified name, so every spelling of a
  reference (bare name, ``Class.member``, aliased import) lands on the same
  object.
- ``ModuleSymbol``: a module, project-local or not.
- ``ExternalSymbol``: a name living in a module outside the project, e.g.
  ``riverpod.Provider``. Nothing is known about it besides where it lives.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class DeclarationKind(Enum):
    """Kinds of project declarations."""
    VARIABLE = 'variable'      # module-level or class-level assignment
    PROPERTY = 'property'      # @property / @cached_property method
    FUNCTION = 'function'      # module-level def
    METHOD = 'method'          # def inside a class body
    CLASS = 'class'
    PARAMETER = 'parameter'
    LOCAL = 'local'            # name bound inside a function body


# Kinds that act as "state accessors": reading them yields a stored value.
STATE_ACCESSOR_KINDS = frozenset({DeclarationKind.VARIABLE, DeclarationKind.PROPERTY})


@dataclass(frozen=True)
class Declaration:
    """A declaration of the analyzed project."""
    module: str
    qualified_name: str  # e.g. 'Settings.theme', 'label', 'build.<locals>.ref@812'
    kind: DeclarationKind
    name: str = field(compare=False)
    class_name: str = field(default='', compare=False)  # Immediately enclosing class
    node: Any = field(default=None, compare=False, repr=False)  # Declaring syntax node
    unit: Any = field(default=None, compare=False, repr=False)  # Owning SourceUnit
    annotation: Any = field(default=None, compare=False, repr=False)  # `type` node if any
    value: Any = field(default=None, compare=False, repr=False)  # Assigned expression if any

    @property
    def is_state_accessor(self) -> bool:
        return self.kind in STATE_ACCESSOR_KINDS

    def __str__(self) -> str:
        return f"{self.module}.{self.qualified_name}"


@dataclass(frozen=True)
class ModuleSymbol:
    """A module. ``unit`` is set when the module belongs to the project."""
    name: str
    unit: Any = field(default=None, compare=False, repr=False)

    @property
    def module(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ExternalSymbol:
    """A (possibly dotted) name inside a module that is not part of the project."""
    module: str
    name: str

    @property
    def declared_name(self) -> str:
        """Last segment of the name: 'Provider.family' -> 'family'."""
        return self.name.rsplit('.', 1)[-1]

    def __str__(self) -> str:
        return f"{self.module}.{self.name}"


Symbol = Union[Declaration, ModuleSymbol, ExternalSymbol]


def declared_name(symbol: Optional[Symbol]) -> Optional[str]:
    """Name a symbol was declared with, independent of any import alias."""
    if symbol is None:
        return None
    if isinstance(symbol, ExternalSymbol):
        return symbol.declared_name
    if isinstance(symbol, ModuleSymbol):
        return symbol.name.rsplit('.', 1)[-1]
    return symbol.name

"""Project-wide semantic model over tree-sitter syntax trees.

The SymbolResolver indexes every source file of the analyzed project and
answers the questions the provider analysis asks about the code:

- which declarations a file has (top-level, and class-level members of
  top-level classes),
- which declaration an identifier or attribute chain denotes,
- what the static type of a declaration or expression is,
- whether a symbol belongs to one of the framework packages.

Resolution is best effort. Anything that cannot be determined statically
(dynamic attributes, untyped parameters, unknown modules) resolves to None
instead of raising.
"""
import builtins
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union
from tree_sitter import Node, Tree

from .parser import LanguageParser
from .symbols import Declaration, DeclarationKind, ExternalSymbol, ModuleSymbol, Symbol
from .syntax import (
    FUNCTION_SCOPES,
    decorator_names,
    enclosing_definition,
    iter_statements,
    line_of,
    node_key,
    node_text,
    positional_arguments,
    same_node,
    unwrap_callee,
    unwrap_parentheses,
)


# Decorators turning a method into a computed attribute
PROPERTY_DECORATORS = {'property', 'cached_property'}

# Parameter receiving the framework ref in overridden framework methods
REF_PARAMETER = 'ref'

# typing constructs whose first argument is the actual type
TYPING_WRAPPERS = {'Optional', 'Annotated', 'Union', 'ClassVar', 'Final', 'ReadOnly', 'Required', 'NotRequired'}
TYPING_MODULES = {'typing', 'typing_extensions'}


@dataclass
class ImportBinding:
    """A name bound by an import statement."""
    local_name: str
    module: str  # Module as written, without the leading dots
    level: int = 0  # Leading dots of a relative import
    original_name: Optional[str] = None  # 'y' for 'from x import y', None for 'import x'
    line_number: int = 0


Binding = Union[Declaration, ImportBinding]


@dataclass
class SourceUnit:
    """One indexed source file."""
    path: Path
    module: str
    tree: Tree
    is_package: bool = False
    names: Dict[str, Binding] = field(default_factory=dict)  # Module namespace
    declared: Dict[str, Declaration] = field(default_factory=dict)  # qualified name -> declaration, in source order
    class_members: Dict[str, Dict[str, Declaration]] = field(default_factory=dict)
    star_imports: List[ImportBinding] = field(default_factory=list)
    node_declarations: Dict[Tuple[int, int, str], Declaration] = field(default_factory=dict)
    scopes: Dict[Tuple[int, int, str], Dict[str, Binding]] = field(default_factory=dict)
    callback_refs: Dict[Tuple[int, int, str], Symbol] = field(default_factory=dict)  # def node -> type of its ref parameter

    @property
    def root_node(self) -> Node:
        return self.tree.root_node


def module_name_for(project_root: Path, file_path: Path) -> Tuple[str, bool]:
    """Dotted module name of a file, and whether it is a package __init__.

    Files under ``<root>/src`` are named relative to ``src`` (src layout).
    """
    src_dir = project_root / 'src'
    base = src_dir if src_dir in file_path.parents else project_root
    parts = list(file_path.relative_to(base).with_suffix('').parts)

    is_package = bool(parts) and parts[-1] == '__init__'
    if is_package:
        parts = parts[:-1]
    return '.'.join(parts), is_package


class SymbolResolver:
    """Compiler-level symbol resolution over all files of a project."""

    def __init__(self, project_root: str | Path, framework_packages: Iterable[str]):
        self.root = Path(project_root).resolve()
        self.framework_packages = frozenset(framework_packages)
        self.units: Dict[str, SourceUnit] = {}
        self._packages: Set[str] = set()
        self._resolving: Set[Declaration] = set()

    @classmethod
    def from_files(cls, project_root: str | Path, files: Iterable[Path],
                   framework_packages: Iterable[str],
                   parser: Optional[LanguageParser] = None) -> 'SymbolResolver':
        """Parse and index the given files. Unreadable files are skipped."""
        resolver = cls(project_root, framework_packages)
        parser = parser or LanguageParser('python')

        for file_path in sorted(Path(f).resolve() for f in files):
            tree = parser.parse_file(file_path)
            if tree is None:
                continue
            resolver.add_unit(file_path, tree)

        return resolver

    # -------------------------------------------------------------------------
    # Indexing
    # -------------------------------------------------------------------------

    def add_unit(self, file_path: Path, tree: Tree) -> SourceUnit:
        """Index a parsed file and register it under its module name."""
        module, is_package = module_name_for(self.root, file_path)
        unit = SourceUnit(path=file_path, module=module, tree=tree, is_package=is_package)

        for statement in iter_statements(tree.root_node):
            self._index_statement(unit, statement, owner=None)

        self.units[module] = unit
        parts = module.split('.') if module else []
        for i in range(1, len(parts) + 1):
            self._packages.add('.'.join(parts[:i]))
        return unit

    def _index_statement(self, unit: SourceUnit, statement: Node, owner: Optional[Declaration]):
        if statement.type == 'decorated_definition':
            definition = statement.child_by_field_name('definition')
            if definition is not None:
                self._index_statement(unit, definition, owner)

        elif statement.type == 'function_definition':
            if owner is None:
                kind = DeclarationKind.FUNCTION
            elif PROPERTY_DECORATORS.intersection(decorator_names(statement)):
                kind = DeclarationKind.PROPERTY
            else:
                kind = DeclarationKind.METHOD
            self._declare(unit, owner, statement.child_by_field_name('name'), kind, statement)

        elif statement.type == 'class_definition':
            declaration = self._declare(
                unit, owner, statement.child_by_field_name('name'), DeclarationKind.CLASS, statement
            )
            if declaration is None:
                return
            unit.class_members.setdefault(declaration.qualified_name, {})
            body = statement.child_by_field_name('body')
            if body is not None:
                for member in iter_statements(body):
                    self._index_statement(unit, member, owner=declaration)

        elif statement.type == 'expression_statement':
            for child in statement.named_children:
                if child.type == 'assignment':
                    self._index_assignment(unit, child, owner)

        elif statement.type in ('import_statement', 'import_from_statement') and owner is None:
            for binding in parse_import(statement):
                if binding.original_name == '*':
                    unit.star_imports.append(binding)
                else:
                    unit.names[binding.local_name] = binding

    def _index_assignment(self, unit: SourceUnit, assignment: Node, owner: Optional[Declaration]):
        targets, value = assignment_targets(assignment)
        annotation = assignment.child_by_field_name('type')
        single = len(targets) == 1

        for target in targets:
            if target.type == 'identifier':
                self._declare(unit, owner, target, DeclarationKind.VARIABLE, assignment,
                              annotation=annotation if single else None, value=value)
            elif target.type in ('pattern_list', 'tuple_pattern', 'list_pattern'):
                for element in target.named_children:
                    if element.type == 'identifier':
                        self._declare(unit, owner, element, DeclarationKind.VARIABLE, assignment)

    def _declare(self, unit: SourceUnit, owner: Optional[Declaration], name_node: Optional[Node],
                 kind: DeclarationKind, node: Node, annotation: Node = None,
                 value: Node = None) -> Optional[Declaration]:
        if name_node is None:
            return None

        name = node_text(name_node)
        qualified_name = f"{owner.qualified_name}.{name}" if owner else name
        declaration = Declaration(
            module=unit.module,
            qualified_name=qualified_name,
            kind=kind,
            name=name,
            class_name=owner.name if owner else '',
            node=node,
            unit=unit,
            annotation=annotation,
            value=value,
        )

        if owner is None:
            unit.names[name] = declaration
            unit.declared[qualified_name] = declaration
        else:
            unit.class_members.setdefault(owner.qualified_name, {})[name] = declaration
            if not owner.class_name:
                # Member of a top-level class
                unit.declared[qualified_name] = declaration

        if kind in (DeclarationKind.CLASS, DeclarationKind.FUNCTION, DeclarationKind.METHOD,
                    DeclarationKind.PROPERTY):
            unit.node_declarations[node_key(node)] = declaration
        return declaration

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def declarations(self, unit: SourceUnit) -> List[Declaration]:
        """Top-level declarations and members of top-level classes, in source order."""
        return list(unit.declared.values())

    def class_members(self, declaration: Declaration) -> Dict[str, Declaration]:
        if declaration.unit is None:
            return {}
        return declaration.unit.class_members.get(declaration.qualified_name, {})

    def class_method(self, declaration: Declaration, name: str) -> Optional[Declaration]:
        """Method (or property) ``name`` declared directly in a class."""
        member = self.class_members(declaration).get(name)
        if member is not None and member.kind in (DeclarationKind.METHOD, DeclarationKind.PROPERTY):
            return member
        return None

    def base_classes(self, declaration: Declaration) -> List[Symbol]:
        """Resolved positional base classes of a class declaration."""
        superclasses = declaration.node.child_by_field_name('superclasses')
        bases = []
        for argument in positional_arguments(superclasses):
            symbol = self.resolve_reference(declaration.unit, unwrap_callee(argument))
            if symbol is not None:
                bases.append(symbol)
        return bases

    def superclass(self, declaration: Declaration) -> Optional[Symbol]:
        """The first positional base class, if it resolves."""
        superclasses = declaration.node.child_by_field_name('superclasses')
        arguments = positional_arguments(superclasses)
        if not arguments:
            return None
        return self.resolve_reference(declaration.unit, unwrap_callee(arguments[0]))

    def is_from_framework(self, symbol: Optional[Symbol]) -> bool:
        """Returns True if a symbol is defined in one of the framework packages."""
        if symbol is None or not symbol.module:
            return False
        return symbol.module.split('.')[0] in self.framework_packages

    # -------------------------------------------------------------------------
    # Name resolution
    # -------------------------------------------------------------------------

    def resolve_reference(self, unit: SourceUnit, expression: Optional[Node]) -> Optional[Symbol]:
        """Symbol denoted by an identifier or attribute chain."""
        expression = unwrap_parentheses(expression)
        if expression is None:
            return None

        if expression.type == 'identifier':
            return self.lookup_name(unit, node_text(expression), at=expression)

        if expression.type == 'attribute':
            target = expression.child_by_field_name('object')
            name = node_text(expression.child_by_field_name('attribute'))
            base = self.resolve_reference(unit, target)
            if base is not None:
                return self.lookup_member(base, name)
            # family(1).select, Factory().provider: go through the value's type
            target_type = self.expression_type(unit, target)
            if target_type is None:
                return None
            return self._member_of_type(target_type, name)

        return None

    def lookup_name(self, unit: SourceUnit, name: str, at: Optional[Node] = None) -> Optional[Symbol]:
        """Resolve a bare name following Python's scoping rules.

        Function and lambda scopes apply to code in their body; a class body is
        only visible to code directly inside it, not to nested functions.
        """
        crossed_function = False
        child, node = at, (at.parent if at is not None else None)

        while node is not None:
            body = node.child_by_field_name('body') if node.type in FUNCTION_SCOPES or node.type == 'class_definition' else None

            if node.type in FUNCTION_SCOPES and same_node(child, body):
                binding = self._function_scope(unit, node).get(name)
                if binding is not None:
                    return self._resolve_binding(unit, binding)
                crossed_function = True

            elif node.type == 'class_definition' and same_node(child, body) and not crossed_function:
                owner = unit.node_declarations.get(node_key(node))
                if owner is not None:
                    member = self.class_members(owner).get(name)
                    if member is not None:
                        return member

            child, node = node, node.parent

        return self.lookup_module_name(unit, name)

    def lookup_module_name(self, unit: SourceUnit, name: str) -> Optional[Symbol]:
        binding = unit.names.get(name)
        if binding is not None:
            return self._resolve_binding(unit, binding)

        if hasattr(builtins, name):
            return None

        for star in unit.star_imports:
            found = self.lookup_module_member(self._absolute_module(unit, star), name)
            if found is not None:
                return found
        return None

    def lookup_member(self, symbol: Symbol, name: str) -> Optional[Symbol]:
        """Resolve ``symbol.name``."""
        if isinstance(symbol, ModuleSymbol):
            return self.lookup_module_member(symbol.name, name)
        if isinstance(symbol, ExternalSymbol):
            return ExternalSymbol(symbol.module, f"{symbol.name}.{name}")
        if symbol.kind == DeclarationKind.CLASS:
            return self.lookup_class_member(symbol, name)
        if symbol.kind in (DeclarationKind.FUNCTION, DeclarationKind.METHOD):
            return None

        aliased = self.alias_target(symbol)
        if aliased is not None:
            # s = Settings; s.theme
            return self.lookup_member(aliased, name)

        # Instance: look the member up on its declared type
        symbol_type = self.declared_type(symbol)
        if symbol_type is None:
            return None
        return self._member_of_type(symbol_type, name)

    def alias_target(self, declaration: Declaration) -> Optional[Symbol]:
        """Class or module an unannotated ``alias = Name`` variable stands for."""
        if declaration.kind != DeclarationKind.VARIABLE or declaration.annotation is not None:
            return None
        value = unwrap_parentheses(declaration.value)
        if value is None or value.type not in ('identifier', 'attribute') or declaration in self._resolving:
            return None

        self._resolving.add(declaration)
        try:
            target = self.resolve_reference(declaration.unit, value)
        finally:
            self._resolving.discard(declaration)

        if isinstance(target, ModuleSymbol):
            return target
        if isinstance(target, Declaration) and target.kind == DeclarationKind.CLASS:
            return target
        return None

    def _member_of_type(
self, symbol_type: Symbol, name: str) -> Optional[Symbol]:
        if isinstance(symbol_type, Declaration) and symbol_type.kind == DeclarationKind.CLASS:
            return self.lookup_class_member(symbol_type, name)
        if isinstance(symbol_type, ExternalSymbol):
            return ExternalSymbol(symbol_type.module, f"{symbol_type.name}.{name}")
        return None

    def lookup_class_member(self, declaration: Declaration, name: str,
                            _seen: Optional[Set[Declaration]] = None) -> Optional[Symbol]:
        """Class attribute lookup through project base classes.

        A member inherited from a class outside the project is reported as an
        ExternalSymbol of that class' package.
        """
        seen = _seen or set()
        seen.add(declaration)

        member = self.class_members(declaration).get(name)
        if member is not None:
            return member

        for base in self.base_classes(declaration):
            if isinstance(base, ExternalSymbol):
                return ExternalSymbol(base.module, f"{base.name}.{name}")
            if isinstance(base, Declaration) and base.kind == DeclarationKind.CLASS and base not in seen:
                found = self.lookup_class_member(base, name, seen)
                if found is not None:
                    return found
        return None

    def external_origin(self, declaration: Declaration, name: str,
                        _seen: Optional[Set[Declaration]] = None) -> Optional[ExternalSymbol]:
        """Member of a class outside the project that ``name`` overrides.

        The class' own members are skipped; project base classes are searched
        until an external base is reached.
        """
        seen = _seen or set()
        seen.add(declaration)

        for base in self.base_classes(declaration):
            if isinstance(base, ExternalSymbol):
                return ExternalSymbol(base.module, f"{base.name}.{name}")
            if isinstance(base, Declaration) and base.kind == DeclarationKind.CLASS and base not in seen:
                found = self.external_origin(base, name, seen)
                if found is not None:
                    return found
        return None

    def lookup_module_member(
self, module: str, name: str,
                             _seen: Optional[Set[Tuple[str, str]]] = None) -> Optional[Symbol]:
        """Resolve ``name`` inside ``module``, following re-exports."""
        submodule = f"{module}.{name}" if module else name
        unit = self.units.get(module)

        if unit is None:
            if submodule in self._packages:
                return self.module_symbol(submodule)
            if module in self._packages:
                # Namespace package of the project without such a member
                return None
            return ExternalSymbol(module, name)

        seen = _seen or set()
        if (module, name) in seen:
            return None
        seen.add((module, name))

        binding = unit.names.get(name)
        if binding is not None:
            return self._resolve_binding(unit, binding, seen)

        if submodule in self._packages:
            return self.module_symbol(submodule)

        for star in unit.star_imports:
            found = self.lookup_module_member(self._absolute_module(unit, star), name, seen)
            if found is not None:
                return found
        return None

    def module_symbol(self, module: str) -> ModuleSymbol:
        return ModuleSymbol(module, self.units.get(module))

    def _resolve_binding(self, unit: SourceUnit, binding: Binding,
                         seen: Optional[Set[Tuple[str, str]]] = None) -> Optional[Symbol]:
        if isinstance(binding, Declaration):
            return binding
        module = self._absolute_module(unit, binding)
        if binding.original_name is None:
            return self.module_symbol(module)
        return self.lookup_module_member(module, binding.original_name, seen)

    def _absolute_module(self, unit: SourceUnit, binding: ImportBinding) -> str:
        if binding.level == 0:
            return binding.module

        package = unit.module.split('.') if unit.module else []
        if not unit.is_package:
            package = package[:-1]
        if binding.level > 1:
            package = package[:max(len(package) - (binding.level - 1), 0)]
        if binding.module:
            package = package + binding.module.split('.')
        return '.'.join(package)

    def _function_scope(self, unit: SourceUnit, function: Node) -> Dict[str, Binding]:
        """Parameters and local bindings of a function or lambda (cached)."""
        key = node_key(function)
        if key in unit.scopes:
            return unit.scopes[key]

        owner = unit.node_declarations.get(key)
        scope_name = f"{owner.qualified_name if owner else function.type}@{function.start_byte}"
        scope: Dict[str, Binding] = {}

        for parameter, name_node, annotation in iter_parameters(function):
            name = node_text(name_node)
            scope[name] = Declaration(
                module=unit.module,
                qualified_name=f"{scope_name}.<locals>.{name}",
                kind=DeclarationKind.PARAMETER,
                name=name,
                node=parameter,
                unit=unit,
                annotation=annotation,
            )

        body = function.child_by_field_name('body')
        if function.type == 'function_definition' and body is not None:
            self._collect_locals(unit, body, scope_name, scope)

        unit.scopes[key] = scope
        return scope

    def _collect_locals(self, unit: SourceUnit, node: Node, scope_name: str, scope: Dict[str, Binding]):
        for child in node.named_children:
            kind, name_nodes, annotation, value = None, [], None, None

            if child.type == 'decorated_definition':
                definition = child.child_by_field_name('definition')
                if definition is not None:
                    child = definition

            if child.type == 'function_definition':
                kind, name_nodes = DeclarationKind.FUNCTION, [child.child_by_field_name('name')]
            elif child.type == 'class_definition':
                kind, name_nodes = DeclarationKind.CLASS, [child.child_by_field_name('name')]
            elif child.type == 'assignment':
                targets, value = assignment_targets(child)
                annotation = child.child_by_field_name('type') if len(targets) == 1 else None
                kind = DeclarationKind.LOCAL
                for target in targets:
                    if target.type == 'identifier':
                        name_nodes.append(target)
                    elif target.type in ('pattern_list', 'tuple_pattern', 'list_pattern'):
                        value = None
                        name_nodes.extend(e for e in target.named_children if e.type == 'identifier')
            elif child.type == 'named_expression':
                kind, name_nodes = DeclarationKind.LOCAL, [child.child_by_field_name('name')]
                value = child.child_by_field_name('value')
            elif child.type == 'for_statement':
                left = child.child_by_field_name('left')
                if left is not None:
                    kind = DeclarationKind.LOCAL
                    name_nodes = [left] if left.type == 'identifier' else [
                        e for e in left.named_children if e.type == 'identifier'
                    ]
            elif child.type in ('import_statement', 'import_from_statement'):
                for binding in parse_import(child):
                    if binding.original_name != '*':
                        scope[binding.local_name] = binding
                continue

            for name_node in name_nodes:
                if name_node is None:
                    continue
                name = node_text(name_node)
                scope[name] = Declaration(
                    module=unit.module,
                    qualified_name=f"{scope_name}.<locals>.{name}",
                    kind=kind,
                    name=name,
                    node=child,
                    unit=unit,
                    annotation=annotation,
                    value=value,
                )

            # Nested scopes keep their own bindings
            if child.type not in ('function_definition', 'class_definition', 'lambda'):
                self._collect_locals(unit, child, scope_name, scope)

    # -------------------------------------------------------------------------
    # Static types
    # -------------------------------------------------------------------------

    def declared_type(self, declaration: Declaration) -> Optional[Symbol]:
        """Static type of a declaration, or None when it cannot be determined."""
        if declaration in self._resolving:
            return None
        self._resolving.add(declaration)
        try:
            return self._declared_type(declaration)
        finally:
            self._resolving.discard(declaration)

    def _declared_type(self, declaration: Declaration) -> Optional[Symbol]:
        kind = declaration.kind
        unit = declaration.unit

        if kind in (DeclarationKind.CLASS, DeclarationKind.FUNCTION, DeclarationKind.METHOD):
            return None
        if kind == DeclarationKind.PROPERTY:
            return self.resolve_annotation(unit, declaration.node.child_by_field_name('return_type'))
        if kind == DeclarationKind.PARAMETER:
            return self._parameter_type(declaration)

        if declaration.annotation is not None:
            annotated = self.resolve_annotation(unit, declaration.annotation)
            if annotated is not None:
                return annotated
        if declaration.value is not None:
            return self.expression_type(unit, declaration.value)
        return None

    def _parameter_type(self, declaration: Declaration) -> Optional[Symbol]:
        unit = declaration.unit
        if declaration.annotation is not None:
            return self.resolve_annotation(unit, declaration.annotation)

        parameters = declaration.node.parent
        function = parameters.parent if parameters is not None else None
        if function is None:
            return None

        positional = [p for p in parameters.named_children if p.type != 'comment']
        is_first = bool(positional) and same_node(positional[0], declaration.node)

        if function.type == 'lambda':
            return self._closure_parameter_type(unit, function) if is_first else None
        if function.type != 'function_definition':
            return None

        bound = unit.callback_refs.get(node_key(function))
        if is_first and bound is not None:
            # Provider(my_function)
            return bound

        owner = self._enclosing_class(unit, function)
        if is_first:
            # self / cls
            if 'staticmethod' in decorator_names(function):
                return None
            return owner

        if owner is not None and declaration.name == REF_PARAMETER:
            # def build(self, context, ref) overriding ConsumerWidget.build
            overridden = self.external_origin(owner, node_text(function.child_by_field_name('name')))
            if self.is_from_framework(overridden):
                return ExternalSymbol(overridden.module, 'WidgetRef')
        return None

    def bind_callback(self, function: Declaration, ref_type: Symbol):
        """Type the first parameter of a function handed to a framework constructor."""
        function.unit.callback_refs[node_key(function.node)] = ref_type

    def _enclosing_class(self, unit: SourceUnit, function: Node) -> Optional[Declaration]:
        block = enclosing_definition(function).parent
        if block is None or block.type != 'block' or block.parent is None:
            return None
        if block.parent.type != 'class_definition':
            return None
        return unit.node_declarations.get(node_key(block.parent))

    def _closure_parameter_type(self, unit: SourceUnit, closure: Node) -> Optional[Symbol]:
        """A closure handed to a framework call receives the framework's ref object."""
        parent = closure.parent
        if parent is not None and parent.type == 'keyword_argument':
            parent = parent.parent
        if parent is None or parent.type != 'argument_list' or parent.parent is None:
            return None

        call = parent.parent
        if call.type != 'call':
            return None
        callee = self.resolve_reference(unit, unwrap_callee(call.child_by_field_name('function')))
        if self.is_from_framework(callee):
            return ExternalSymbol(callee.module, 'Ref')
        return None

    def expression_type(self, unit: SourceUnit, expression: Optional[Node]) -> Optional[Symbol]:
        """Static type of an expression, or None."""
        expression = unwrap_parentheses(expression)
        if expression is None:
            return None

        if expression.type in ('identifier', 'attribute'):
            symbol = self.resolve_reference(unit, expression)
            if isinstance(symbol, Declaration):
                return self.declared_type(symbol)
            if isinstance(symbol, ExternalSymbol):
                # Nothing is known about external values besides their package
                return symbol
            return None

        if expression.type == 'call':
            callee = self.resolve_reference(unit, unwrap_callee(expression.child_by_field_name('function')))
            return self.call_result_type(callee)

        if expression.type == 'await':
            inner = next((c for c in expression.named_children if c.type != 'comment'), None)
            return self.expression_type(unit, inner)

        return None

    def call_result_type(self, callee: Optional[Symbol]) -> Optional[Symbol]:
        """Type of the value returned by calling ``callee``."""
        if callee is None or isinstance(callee, ModuleSymbol):
            return None
        if isinstance(callee, ExternalSymbol):
            return callee
        if callee.kind == DeclarationKind.CLASS:
            return callee
        if callee.kind in (DeclarationKind.FUNCTION, DeclarationKind.METHOD):
            return self.resolve_annotation(callee.unit, callee.node.child_by_field_name('return_type'))

        # Calling a value, e.g. a provider family: keep the package of its type
        value_type = self.declared_type(callee)
        return value_type if isinstance(value_type, ExternalSymbol) else None

    def resolve_annotation(self, unit: SourceUnit, annotation: Optional[Node]) -> Optional[Symbol]:
        """Symbol named by a type annotation.

        Handles generics (Provider[int]), typing wrappers (Optional[X]),
        unions (X | None), dotted names, quoted forward references and
        module-level aliases (MyRef = Ref[int]).
        """
        annotation = unwrap_parentheses(annotation)
        if annotation is None:
            return None
        kind = annotation.type

        if kind in ('identifier', 'attribute'):
            symbol = self.resolve_reference(unit, annotation)
            if (isinstance(symbol, Declaration) and symbol.kind == DeclarationKind.VARIABLE
                    and symbol.value is not None and symbol not in self._resolving):
                self._resolving.add(symbol)
                try:
                    return self.resolve_annotation(symbol.unit, symbol.value)
                finally:
                    self._resolving.discard(symbol)
            return symbol

        if kind in ('type', 'type_parameter'):
            inner = next((c for c in annotation.named_children if c.type != 'comment'), None)
            return self.resolve_annotation(unit, inner)

        if kind in ('subscript', 'generic_type'):
            if kind == 'subscript':
                head = annotation.child_by_field_name('value')
                arguments = annotation.children_by_field_name('subscript')
            else:
                children = [c for c in annotation.named_children if c.type != 'comment']
                head = children[0] if children else None
                arguments = [
                    t for c in children[1:] if c.type == 'type_parameter'
                    for t in c.named_children if t.type != 'comment'
                ]
            head_symbol = self.resolve_annotation(unit, head)
            if (isinstance(head_symbol, ExternalSymbol) and head_symbol.module in TYPING_MODULES
                    and head_symbol.declared_name in TYPING_WRAPPERS and arguments):
                return self.resolve_annotation(unit, arguments[0])
            return head_symbol

        if kind == 'member_type':
            children = [c for c in annotation.named_children if c.type != 'comment']
            if len(children) != 2:
                return None
            base = self.resolve_annotation(unit, children[0])
            return self.lookup_member(base, node_text(children[1])) if base is not None else None

        if kind in ('binary_operator', 'union_type'):
            for operand in annotation.named_children:
                if operand.type in ('none', 'comment') or node_text(operand) == 'None':
                    continue
                found = self.resolve_annotation(unit, operand)
                if found is not None:
                    return found
            return None

        if kind == 'string':
            return self._resolve_forward_reference(unit, annotation)

        return None

    def _resolve_forward_reference(self, unit: SourceUnit, string: Node) -> Optional[Symbol]:
        # "Provider[int]" names Provider
        dotted = node_text(string).strip('\'"').split('[', 1)[0].strip()
        parts = dotted.split('.')
        if not all(part.isidentifier() for part in parts):
            return None

        symbol = self.lookup_name(unit, parts[0], at=string)
        for part in parts[1:]:
            if symbol is None:
                return None
            symbol = self.lookup_member(symbol, part)
        return symbol


def assignment_targets(assignment: Node) -> Tuple[List[Node], Optional[Node]]:
    """Targets of a (possibly chained) assignment and the assigned value.

    a = b = value -> ([a, b], value)
    """
    targets = []
    left = assignment.child_by_field_name('left')
    if left is not None:
        targets.append(left)

    value = assignment.child_by_field_name('right')
    while value is not None and value.type == 'assignment':
        inner_left = value.child_by_field_name('left')
        if inner_left is not None:
            targets.append(inner_left)
        value = value.child_by_field_name('right')
    return targets, value


def iter_parameters(function: Node):
    """Yield (parameter node, name node, annotation node) of a def or lambda."""
    parameters = function.child_by_field_name('parameters')
    if parameters is None:
        return

    for parameter in parameters.named_children:
        name_node, annotation = None, None

        if parameter.type == 'identifier':
            name_node = parameter
        elif parameter.type == 'typed_parameter':
            annotation = parameter.child_by_field_name('type')
            name_node = next((c for c in parameter.named_children if c.type == 'identifier'), None)
            if name_node is None:
                # *args: int / **kwargs: str
                splat = next((c for c in parameter.named_children
                              if c.type in ('list_splat_pattern', 'dictionary_splat_pattern')), None)
                if splat is not None:
                    name_node = next((c for c in splat.named_children if c.type == 'identifier'), None)
        elif parameter.type in ('default_parameter', 'typed_default_parameter'):
            name_node = parameter.child_by_field_name('name')
            annotation = parameter.child_by_field_name('type')
        elif parameter.type in ('list_splat_pattern', 'dictionary_splat_pattern'):
            name_node = next((c for c in parameter.named_children if c.type == 'identifier'), None)

        if name_node is not None and name_node.type == 'identifier':
            yield parameter, name_node, annotation


def parse_import(statement: Node) -> List[ImportBinding]:
    """Bindings introduced by an import statement.

    import a.b          -> a      (module 'a')
    import a.b as c     -> c      (module 'a.b')
    from .x import y as z -> z    (name 'y' of module '.x')
    from x import *     -> '*'
    """
    line_number = line_of(statement)
    bindings = []

    if statement.type == 'import_statement':
        for name_node in statement.children_by_field_name('name'):
            if name_node.type == 'aliased_import':
                module = node_text(name_node.child_by_field_name('name'))
                alias = node_text(name_node.child_by_field_name('alias'))
                bindings.append(ImportBinding(alias, module, line_number=line_number))
            else:
                first = node_text(name_node).split('.')[0]
                bindings.append(ImportBinding(first, first, line_number=line_number))
        return bindings

    module_node = statement.child_by_field_name('module_name')
    level, module = 0, node_text(module_node)
    if module_node is not None and module_node.type == 'relative_import':
        prefix = next((c for c in module_node.children if c.type == 'import_prefix'), None)
        dotted = next((c for c in module_node.children if c.type == 'dotted_name'), None)
        level = len(node_text(prefix).strip())
        module = node_text(dotted)

    if any(child.type == 'wildcard_import' for child in statement.children):
        bindings.append(ImportBinding('*', module, level, '*', line_number))

    for name_node in statement.children_by_field_name('name'):
        if name_node.type == 'aliased_import':
            original = node_text(name_node.child_by_field_name('name'))
            local = node_text(name_node.child_by_field_name('alias'))
        else:
            original = local = node_text(name_node)
        bindings.append(ImportBinding(local, module, level, original, line_number))

    return bindings

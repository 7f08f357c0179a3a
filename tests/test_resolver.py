"""Tests for the SymbolResolver: module naming, imports, scopes and types."""

from pathlib import Path

import pytest

from riverpod_graph.analyzer.resolver import SymbolResolver, module_name_for, parse_import
from riverpod_graph.analyzer.parser import LanguageParser
from riverpod_graph.analyzer.symbols import DeclarationKind, ExternalSymbol, ModuleSymbol
from riverpod_graph.analyzer.syntax import node_text


FRAMEWORK = ['riverpod', 'flutter_riverpod']


@pytest.fixture
def resolve(write_project):
    def _resolve(files):
        root = write_project(files)
        return SymbolResolver.from_files(root, root.rglob('*.py'), FRAMEWORK)
    return _resolve


def find_identifier(unit, name, occurrence=-1):
    """The nth identifier node spelled `name` (last one by default)."""
    found = []

    def walk(node):
        if node.type == 'identifier' and node_text(node) == name:
            found.append(node)
        for child in node.children:
            walk(child)

    walk(unit.root_node)
    return found[occurrence]


class TestModuleNames:
    """Dotted module names derived from file paths."""

    def test_flat_layout(self):
        root = Path('/project')
        assert module_name_for(root, root / 'app' / 'state.py') == ('app.state', False)
        assert module_name_for(root, root / 'app' / '__init__.py') == ('app', True)
        assert module_name_for(root, root / 'main.py') == ('main', False)

    def test_src_layout(self):
        root = Path('/project')
        assert module_name_for(root, root / 'src' / 'shop' / 'cart.py') == ('shop.cart', False)
        assert module_name_for(root, root / 'src' / 'shop' / '__init__.py') == ('shop', True)


class TestImports:
    """Import statement parsing and resolution."""

    def parse(self, source):
        tree = LanguageParser('python').parse_source(source.encode('utf-8'))
        return parse_import(tree.root_node.named_children[0])

    def test_parse_import_forms(self):
        plain = self.parse('import a.b\n')[0]
        assert (plain.local_name, plain.module, plain.original_name) == ('a', 'a', None)

        aliased = self.parse('import a.b as c\n')[0]
        assert (aliased.local_name, aliased.module) == ('c', 'a.b')

        relative = self.parse('from ..x import y as z\n')[0]
        assert (relative.local_name, relative.module, relative.level, relative.original_name) == (
            'z', 'x', 2, 'y'
        )

        star = self.parse('from riverpod import *\n')[0]
        assert star.original_name == '*'

    def test_relative_imports(self, resolve):
        resolver = resolve({
            'pkg/__init__.py': 'from .core import value\n',
            'pkg/core.py': 'value = 1\n',
            'pkg/sub/__init__.py': '',
            'pkg/sub/leaf.py': 'from ..core import value\nfrom . import sibling\n',
            'pkg/sub/sibling.py': '',
        })

        leaf = resolver.units['pkg.sub.leaf']
        value = resolver.lookup_module_name(leaf, 'value')
        assert str(value) == 'pkg.core.value'
        assert resolver.lookup_module_name(leaf, 'sibling') == ModuleSymbol('pkg.sub.sibling')
        # Re-export through the package
        assert resolver.lookup_module_member('pkg', 'value') == value

    def test_external_modules(self, resolve):
        resolver = resolve({'app.py': 'import riverpod as rp\nfrom riverpod.providers import Provider\n'})
        unit = resolver.units['app']

        assert resolver.lookup_module_name(unit, 'Provider') == ExternalSymbol('riverpod.providers', 'Provider')
        assert resolver.is_from_framework(resolver.lookup_module_name(unit, 'Provider'))
        assert resolver.lookup_member(resolver.lookup_module_name(unit, 'rp'), 'Ref') == ExternalSymbol('riverpod', 'Ref')

    def test_builtins_are_not_star_imported(self, resolve):
        resolver = resolve({'app.py': 'from riverpod import *\n'})
        unit = resolver.units['app']

        assert resolver.lookup_module_name(unit, 'len') is None
        assert resolver.lookup_module_name(unit, 'Provider') == ExternalSymbol('riverpod', 'Provider')

    def test_import_cycle_terminates(self, resolve):
        resolver = resolve({
            'a.py': 'from b import thing\n',
            'b.py': 'from a import thing\n',
        })

        assert resolver.lookup_module_member('a', 'thing') is None


class TestScopes:
    """Python scoping rules."""

    SOURCE = '''
from riverpod import Provider

name = 'module'


class Holder:
    name = 'class'
    direct = name

    def method(self, name):
        return name

    def other(self):
        return name


def outer():
    name = 'local'
    return lambda: name
'''

    def test_class_scope(self, resolve):
        resolver = resolve({'app.py': self.SOURCE})
        unit = resolver.units['app']

        # `direct = name` sees the class attribute
        found = resolver.lookup_name(unit, 'name', at=find_identifier(unit, 'name', 2))
        assert found.qualified_name == 'Holder.name'

    def test_parameter_shadows(self, resolve):
        resolver = resolve({'app.py': self.SOURCE})
        unit = resolver.units['app']

        # `return name` in method
        found = resolver.lookup_name(unit, 'name', at=find_identifier(unit, 'name', 4))
        assert found.kind == DeclarationKind.PARAMETER

    def test_methods_skip_class_scope(self, resolve):
        resolver = resolve({'app.py': self.SOURCE})
        unit = resolver.units['app']

        # `return name` in other
        found = resolver.lookup_name(unit, 'name', at=find_identifier(unit, 'name', 5))
        assert found.qualified_name == 'name'
        assert found.kind == DeclarationKind.VARIABLE

    def test_closure_sees_enclosing_local(self, resolve):
        resolver = resolve({'app.py': self.SOURCE})
        unit = resolver.units['app']

        found = resolver.lookup_name(unit, 'name', at=find_identifier(unit, 'name'))
        assert found.kind == DeclarationKind.LOCAL


class TestTypes:
    """Static types of declarations and expressions."""

    def test_declared_types(self, resolve):
        resolver = resolve({'app.py': '''
from typing import Optional
from riverpod import Provider, Ref


class Repository:
    pass


def make_repository() -> Repository:
    return Repository()


def make_provider() -> "Provider[int]":
    return Provider(lambda ref: 0)


repository = make_repository()
other = Repository()
provider = make_provider()
maybe: Optional[Repository] = None
union: Repository | None = None
alias = Repository
aliased: alias = None
'''})
        unit = resolver.units['app']

        def type_of(name):
            return str(resolver.declared_type(unit.names[name]))

        assert type_of('repository') == 'app.Repository'
        assert type_of('other') == 'app.Repository'
        assert type_of('provider') == 'riverpod.Provider'
        assert type_of('maybe') == 'app.Repository'
        assert type_of('union') == 'app.Repository'
        assert type_of('aliased') == 'app.Repository'

    def test_closure_parameter_is_framework_ref(self, resolve):
        resolver = resolve({'app.py': '''
from riverpod import Provider

counter = Provider(lambda ref: ref)
'''})
        unit = resolver.units['app']

        ref_type = resolver.expression_type(unit, find_identifier(unit, 'ref'))
        assert ref_type == ExternalSymbol('riverpod', 'Ref')

    def test_inherited_framework_member(self, resolve):
        resolver = resolve({'app.py': '''
from riverpod import Notifier


class Counter(Notifier):
    def build(self):
        return self.ref
'''})
        unit = resolver.units['app']
        counter = unit.names['Counter']

        assert resolver.lookup_class_member(counter, 'ref') == ExternalSymbol('riverpod', 'Notifier.ref')
        assert resolver.class_method(counter, 'build').kind == DeclarationKind.METHOD
        assert resolver.class_method(counter, 'missing') is None

    def test_self_referencing_value_terminates(self, resolve):
        resolver = resolve({'app.py': 'loop = loop\n'})
        unit = resolver.units['app']

        assert resolver.declared_type(unit.names['loop']) is None

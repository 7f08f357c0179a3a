"""Classification of declarations into providers and consumer widgets."""
from dataclasses import dataclass, field
from typing import Iterable, List

from .resolver import SourceUnit, SymbolResolver
from .symbols import Declaration, DeclarationKind, declared_name


DEFAULT_CONSUMER_BASES = frozenset({
    'ConsumerWidget',
    'ConsumerStatefulWidget',
    'HookConsumerWidget',
})


@dataclass
class ClassifiedEntities:
    """Providers and consumer widgets of one file, in declaration order."""
    providers: List[Declaration] = field(default_factory=list)
    consumers: List[Declaration] = field(default_factory=list)


class EntityClassifier:
    """Finds provider variables and consumer widget classes in a source unit."""

    def __init__(self, resolver: SymbolResolver, consumer_bases: Iterable[str] = DEFAULT_CONSUMER_BASES):
        self.resolver = resolver
        self.consumer_bases = frozenset(consumer_bases)

    def classify(self, unit: SourceUnit) -> ClassifiedEntities:
        """Partition the file's declarations.

        Providers are top-level variables and class-level variables of
        top-level classes whose type comes from the framework. Consumers are
        top-level classes extending one of the framework's consumer widgets.
        Declarations whose type cannot be resolved are left out.
        """
        entities = ClassifiedEntities()

        for declaration in self.resolver.declarations(unit):
            if self.is_provider(declaration):
                entities.providers.append(declaration)
            elif self.is_consumer_widget(declaration):
                entities.consumers.append(declaration)

        return entities

    def is_provider(self, declaration: Declaration) -> bool:
        if declaration.kind != DeclarationKind.VARIABLE:
            return False
        return self.resolver.is_from_framework(self.resolver.declared_type(declaration))

    def is_consumer_widget(self, declaration: Declaration) -> bool:
        if declaration.kind != DeclarationKind.CLASS or declaration.class_name:
            return False

        superclass = self.resolver.superclass(declaration)
        # Matched on the declared name: an import alias does not change what the base is.
        return (
            declared_name(superclass) in self.consumer_bases
            and self.resolver.is_from_framework(superclass)
        )

"""Provider graph builder.

Runs the whole analysis of a project: discover the source files, index them
with the SymbolResolver, then for each file classify its declarations and
visit every consumer widget and provider. All files feed the same
ProviderGraph.
"""
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Set

from ..config import Config, get_config
from .classifier import ClassifiedEntities, EntityClassifier
from .dependency_visitor import ConsumerWidgetVisitor, ProviderDependencyVisitor
from .parser import LanguageParser
from .provider_graph import ProviderGraph
from .reference_resolver import ProviderReferenceResolver
from .resolver import SourceUnit, SymbolResolver


# Vendored code, environments and build artifacts never hold project providers
EXCLUDED_DIRS = {
    'venv', '.venv', 'env', '.virtualenv',
    '.tox', '.nox', 'site-packages',
    'dist', 'build', '__pycache__',
    'node_modules', '.git', '.mypy_cache', '.pytest_cache',
}


class ProviderGraphBuilder:
    """Build the provider dependency graph of a project."""

    def __init__(self, project_root: str | Path = ".", config: Optional[Config] = None,
                 graph: Optional[ProviderGraph] = None):
        """Initialize graph builder.

        Args:
            project_root: Root directory of project to analyze
            config: Analysis settings, defaults to the environment configuration
            graph: Graph to fill, a new empty one by default
        """
        self.project_root = Path(project_root).resolve()
        self.config = config or get_config()
        self.graph = graph if graph is not None else ProviderGraph()
        self.resolver: Optional[SymbolResolver] = None

    def build_graph(self, file_patterns: Optional[List[str]] = None,
                    on_file: Optional[Callable[[SourceUnit], None]] = None) -> ProviderGraph:
        """Analyze every source file of the project.

        Args:
            file_patterns: Glob patterns of the files to analyze, '**/*.py' by default
            on_file: Called with each unit before it is processed (progress reporting)

        Returns:
            The filled ProviderGraph

        Raises:
            UnsupportedExpressionError: If a provider access cannot be resolved
        """
        files = self.discover_files(file_patterns or ['**/*.py'])
        self.resolver = SymbolResolver.from_files(
            self.project_root, files, self.config.framework_packages
        )

        for unit in self.units():
            if on_file is not None:
                on_file(unit)
            self.process_unit(unit)

        return self.graph

    def units(self) -> List[SourceUnit]:
        """Indexed files in path order."""
        if self.resolver is None:
            return []
        return sorted(self.resolver.units.values(), key=lambda unit: unit.path)

    def discover_files(self, patterns: Iterable[str]) -> Set[Path]:
        """Discover all source files matching patterns.

        Args:
            patterns: Glob patterns to match

        Returns:
            Set of Path objects for all matching files
        """
        excluded_dirs = EXCLUDED_DIRS | set(self.config.excluded_dirs)

        files = set()
        for pattern in patterns:
            for file_path in self.project_root.glob(pattern):
                relative_parts = file_path.relative_to(self.project_root).parts[:-1]
                if (file_path.is_file()
                        and file_path.suffix.lower() in LanguageParser.SUPPORTED_LANGUAGES
                        and not any(part in excluded_dirs for part in relative_parts)):
                    files.add(file_path)
        return files

    def process_unit(self, unit: SourceUnit) -> ClassifiedEntities:
        """Classify a file's declarations and record their dependencies."""
        reference_resolver = ProviderReferenceResolver(self.resolver)
        classifier = EntityClassifier(self.resolver, self.config.consumer_bases)
        entities = classifier.classify(unit)

        for consumer in entities.consumers:
            ConsumerWidgetVisitor(consumer, self.resolver, self.graph, reference_resolver).run()

        for provider in entities.providers:
            ProviderDependencyVisitor(
                provider, self.resolver, self.graph, reference_resolver,
                build_method=self.config.build_method,
            ).run()

        return entities

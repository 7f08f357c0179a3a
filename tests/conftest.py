"""Shared fixtures: throwaway projects written to tmp_path."""

import textwrap
from pathlib import Path
from typing import Dict

import pytest

from riverpod_graph.config import Config
from riverpod_graph.analyzer.graph_builder import ProviderGraphBuilder


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Analysis settings come from the defaults unless a test sets them."""
    for name in ("RIVERPOD_GRAPH_PACKAGES", "RIVERPOD_GRAPH_CONSUMER_BASES",
                 "RIVERPOD_GRAPH_BUILD_METHOD", "RIVERPOD_GRAPH_EXCLUDED_DIRS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_project(tmp_path):
    """Write {relative path: source} into tmp_path and return the root."""
    def _write(files: Dict[str, str]) -> Path:
        for relative, source in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(source), encoding='utf-8')
        return tmp_path
    return _write


@pytest.fixture
def analyze(write_project):
    """Write a project and run the full analysis on it.

    Returns the ProviderGraphBuilder, its graph and resolver filled.
    """
    def _analyze(files: Dict[str, str]) -> ProviderGraphBuilder:
        root = write_project(files)
        builder = ProviderGraphBuilder(root, config=Config())
        builder.build_graph()
        return builder
    return _analyze


def nodes_by_name(nodes):
    """Index graph nodes by display name."""
    return {node.display_name: node for node in nodes}


def names(nodes):
    return [node.display_name for node in nodes]

"""Mermaid flowchart rendering of a ProviderGraph."""
import io
from typing import TextIO

from ..analyzer.provider_graph import ProviderGraph, ProviderNode


ARROWS = {
    'watch': '==>',
    'listen': '-->',
    'read': '-.->',
}

LEGEND = '''\
  subgraph Arrows
    direction LR
    start1[ ] -..->|read| stop1[ ]
    style start1 height:0px;
    style stop1 height:0px;
    start2[ ] --->|listen| stop2[ ]
    style start2 height:0px;
    style stop2 height:0px;
    start3[ ] ===>|watch| stop3[ ]
    style start3 height:0px;
    style stop3 height:0px;
  end

  subgraph Type
    direction TB
    ConsumerWidget((widget));
    Provider[[provider]];
  end
'''


class MermaidRenderer:
    """Writes the graph as a Mermaid 'flowchart TB' diagram.

    Consumers are drawn as circles, providers as subroutine boxes grouped in
    a subgraph per enclosing class. Arrows go from a dependency to the
    entity that uses it, styled by access kind.
    """

    def __init__(self, graph: ProviderGraph):
        self.graph = graph

    def render(self) -> str:
        buffer = io.StringIO()
        self.write(buffer)
        return buffer.getvalue()

    def write(self, out: TextIO):
        out.write('flowchart TB\n')
        out.write(LEGEND)

        for node in self.graph.consumer_widgets:
            out.write(f'  {node.display_name}(({node.display_name}));\n')
            self._write_edges(out, node, node.display_name)

        for node in self.graph.providers:
            self._write_provider_node(out, node)
            self._write_edges(out, node, node.display_name)

    def _write_edges(self, out: TextIO, node, target_name: str):
        for kind, dependency in node.edges():
            out.write(f'  {dependency.display_name} {ARROWS[kind]} {target_name};\n')

    def _write_provider_node(self, out: TextIO, node: ProviderNode):
        in_class = bool(node.enclosing_class_name)
        if in_class:
            out.write(f'  subgraph {node.enclosing_class_name}\n')
            out.write('  ')
        out.write(f'  {node.display_name}[[{node.name}]];\n')
        if in_class:
            out.write('  end\n')

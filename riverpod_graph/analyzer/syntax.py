"""Small helpers over tree-sitter-python syntax nodes."""
from typing import Iterator, List, Optional, Tuple
from tree_sitter import Node


# Statements whose nested blocks still belong to the enclosing scope
COMPOUND_STATEMENTS = {
    'if_statement', 'elif_clause', 'else_clause',
    'try_statement', 'except_clause', 'except_group_clause', 'finally_clause',
    'with_statement', 'block',
}

# Nodes opening a new Python scope
FUNCTION_SCOPES = {'function_definition', 'lambda'}


def node_text(node: Optional[Node]) -> str:
    """Decoded source text of a node ('' for None)."""
    if node is None or node.text is None:
        return ''
    return node.text.decode('utf-8', errors='ignore')


def node_key(node: Node) -> Tuple[int, int, str]:
    """Key identifying a node within its tree."""
    return (node.start_byte, node.end_byte, node.type)


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return node_key(a) == node_key(b)


def line_of(node: Node) -> int:
    return node.start_point[0] + 1


def unwrap_parentheses(node: Optional[Node]) -> Optional[Node]:
    """(expr) -> expr, any depth."""
    while node is not None and node.type == 'parenthesized_expression':
        inner = [child for child in node.named_children if child.type != 'comment']
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def unwrap_callee(node: Optional[Node]) -> Optional[Node]:
    """Strip parentheses and generic subscripts from a callee: Provider[int] -> Provider."""
    node = unwrap_parentheses(node)
    while node is not None and node.type == 'subscript':
        node = unwrap_parentheses(node.child_by_field_name('value'))
    return node


def positional_arguments(arguments: Optional[Node]) -> List[Node]:
    """Positional arguments of an argument_list, keyword arguments skipped."""
    if arguments is None or arguments.type != 'argument_list':
        return []
    return [
        child for child in arguments.named_children
        if child.type not in ('keyword_argument', 'dictionary_splat', 'comment')
    ]


def iter_statements(node: Node) -> Iterator[Node]:
    """Yield the statements of a module or block, flattening if/try/with bodies."""
    for child in node.named_children:
        if child.type in COMPOUND_STATEMENTS:
            yield from iter_statements(child)
        else:
            yield child


def decorator_names(definition: Node) -> List[str]:
    """Names of the decorators applied to a function/class definition.

    '@functools.cached_property' -> 'cached_property', '@lru_cache(1)' -> 'lru_cache'.
    """
    parent = definition.parent
    if parent is None or parent.type != 'decorated_definition':
        return []

    names = []
    for child in parent.named_children:
        if child.type != 'decorator':
            continue
        expression = next((c for c in child.named_children if c.type != 'comment'), None)
        if expression is not None and expression.type == 'call':
            expression = expression.child_by_field_name('function')
        if expression is None:
            continue
        if expression.type == 'attribute':
            names.append(node_text(expression.child_by_field_name('attribute')))
        else:
            names.append(node_text(expression))
    return names


def enclosing_definition(node: Node) -> Node:
    """The decorated_definition wrapping a definition, or the definition itself."""
    parent = node.parent
    if parent is not None and parent.type == 'decorated_definition':
        return parent
    return node

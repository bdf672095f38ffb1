"""Static extraction of import specifiers with tree-sitter.

Nothing is executed: specifiers come from `import`/`export ... from`
statements, `require()` calls and literal `import()` expressions. Dynamic
expressions whose argument is computed at runtime are reported separately.
"""

import os
from dataclasses import dataclass, field
from typing import Any

from tree_sitter_language_pack import get_parser

from funcpack.node_dependencies.module_name import is_builtin_module

GRAMMAR_BY_EXTENSION = {
    ".js": "javascript",
    ".cjs": "javascript",
    ".mjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}


@dataclass
class ImportList:
    imports: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)


def _node_text(node: Any) -> str:
    return node.text.decode("utf-8", errors="replace") if node is not None and node.text else ""


def _string_value(node: Any) -> str | None:
    """Value of a string literal, or of a template string without substitutions."""
    if node is None:
        return None
    if node.type == "string":
        return _node_text(node)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.children):
            return None
        return _node_text(node)[1:-1]
    return None


def _is_type_only(node: Any) -> bool:
    return any(child.type == "type" for child in node.children)


def _first_argument(call: Any) -> Any:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return None
    return next((child for child in arguments.named_children if child.type != "comment"), None)


def _call_kind(call: Any) -> str | None:
    function = call.child_by_field_name("function")
    if function is None:
        return None
    if function.type == "import":
        return "import"
    if function.type == "identifier" and _node_text(function) == "require":
        return "require"
    return None


def _collect(root: Any) -> tuple[list[str], list[str]]:
    imports: list[str] = []
    unresolved: list[str] = []
    stack = [root]

    while stack:
        node = stack.pop()

        if node.type == "import_statement":
            if not _is_type_only(node):
                source = node.child_by_field_name("source")
                if source is None:
                    # TypeScript `import x = require("y")`
                    clause = next((c for c in node.children if c.type == "import_require_clause"), None)
                    source = clause.child_by_field_name("source") if clause is not None else None
                value = _string_value(source)
                if value:
                    imports.append(value)
            continue

        if node.type == "export_statement":
            source = node.child_by_field_name("source")
            if source is not None:
                if not _is_type_only(node):
                    value = _string_value(source)
                    if value:
                        imports.append(value)
                continue

        if node.type == "call_expression" and _call_kind(node) is not None:
            argument = _first_argument(node)
            value = _string_value(argument)
            if value:
                imports.append(value)
            elif argument is not None:
                unresolved.append(_node_text(node))

        stack.extend(reversed(node.children))

    return imports, unresolved


def parse_imports(source: bytes, grammar: str = "javascript") -> ImportList:
    """Extract specifiers from source text, in order of appearance and without duplicates."""
    tree = get_parser(grammar).parse(source)
    imports, unresolved = _collect(tree.root_node)

    return ImportList(
        imports=[spec for spec in dict.fromkeys(imports) if not is_builtin_module(spec)],
        unresolved=list(dict.fromkeys(unresolved)),
    )


def list_imports(path: str) -> ImportList:
    """Specifiers imported by the file at `path`. Non-JS files import nothing."""
    grammar = GRAMMAR_BY_EXTENSION.get(os.path.splitext(path)[1].lower())
    if grammar is None:
        return ImportList()

    with open(path, "rb") as f:
        source = f.read()

    return parse_imports(source, grammar)

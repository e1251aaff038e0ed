"""Code entity extraction for Rust sources using tree-sitter."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import tree_sitter_language_pack

from ..utils.file_utils import split_lines, walk_source_files
from .errors import ExtractionError
from .models import CodeEntity, CodeKind, Context

logger = logging.getLogger(__name__)

LANGUAGE = "rust"
DEFAULT_EXTENSION = ".rs"
DEFAULT_SKIP_DIRS = ("target",)

# Rendered verbatim rather than token by token
ATOMIC_NODE_TYPES = {
    "string_literal",
    "raw_string_literal",
    "char_literal",
    "lifetime",
    "integer_literal",
    "float_literal",
}

COMMENT_NODE_TYPES = {"line_comment", "block_comment"}

_DOC_ATTRIBUTE = re.compile(r'^#\s*\[\s*doc\s*=\s*r?"(.*)"\s*\]$', re.DOTALL)


# -----------------------------------------------------------------------------
# Node helpers
# -----------------------------------------------------------------------------

def _text(node) -> str:
    return node.text.decode("utf-8")


def _start_line(node) -> int:
    return node.start_point[0] + 1


def _end_line(node) -> int:
    """1-indexed last line of ``node``.

    A node whose extent stops at column 0 ends on the previous line.
    """
    row, column = node.end_point
    if column == 0 and row > node.start_point[0]:
        row -= 1
    return row + 1


def render_tokens(node) -> str:
    """Render a syntax node as its tokens joined by single spaces.

    Comments are dropped, so two declarations that differ only in layout
    render identically.
    """
    tokens: List[str] = []
    _collect_tokens(node, tokens)
    return " ".join(tokens)


def _collect_tokens(node, tokens: List[str]) -> None:
    if node.type in COMMENT_NODE_TYPES:
        return
    if node.child_count == 0 or node.type in ATOMIC_NODE_TYPES:
        token = _text(node).strip()
        if token:
            tokens.append(token)
        return
    for child in node.children:
        _collect_tokens(child, tokens)


def _function_signature(node) -> str:
    tokens: List[str] = []
    for child in node.children:
        if child.type in ("visibility_modifier", "block"):
            continue
        _collect_tokens(child, tokens)
    return " ".join(tokens)


def _is_outer_doc_comment(node) -> bool:
    text = _text(node)
    if node.type == "line_comment":
        return text.startswith("///") and not text.startswith("////")
    if node.type == "block_comment":
        return text.startswith("/**") and not text.startswith("/***") and text != "/**/"
    return False


def _attached_prefix(node) -> List:
    """Outer attributes and doc comments sitting directly above ``node``."""
    attached = []
    sibling = node.prev_sibling
    while sibling is not None:
        if sibling.type == "attribute_item" or _is_outer_doc_comment(sibling):
            attached.append(sibling)
        elif sibling.type not in COMMENT_NODE_TYPES:
            break
        sibling = sibling.prev_sibling
    attached.reverse()
    return attached


def _strip_marker_space(text: str) -> str:
    return text[1:] if text.startswith(" ") else text


def _docstring(attached: Iterable) -> Optional[str]:
    parts: List[str] = []
    for node in attached:
        text = _text(node).rstrip()
        if node.type == "line_comment":
            parts.append(_strip_marker_space(text[3:]))
        elif node.type == "block_comment":
            for line in text[3:-2].strip().split("\n"):
                line = line.strip()
                if line.startswith("*"):
                    line = line[1:].strip()
                parts.append(line)
        else:
            match = _DOC_ATTRIBUTE.match(text)
            if match:
                parts.append(_strip_marker_space(match.group(1)))
    if not parts:
        return None
    return "\n".join(parts)


def _first_error_line(node) -> Optional[int]:
    if node.type == "ERROR" or node.is_missing:
        return _start_line(node)
    for child in node.children:
        if child.has_error:
            found = _first_error_line(child)
            if found is not None:
                return found
    return None


# -----------------------------------------------------------------------------
# Entity builders
# -----------------------------------------------------------------------------

def _with_snippet(
    context: Context,
    lines: List[str],
    line_from: int,
    line_to: int,
    enclosing_type: Optional[str] = None,
) -> Context:
    snippet = "\n".join(lines[line_from - 1:line_to])
    return context.model_copy(update={"enclosing_type": enclosing_type, "snippet": snippet})


def parse_method(node, enclosing_type: str, context: Context, lines: List[str]) -> CodeEntity:
    attached = _attached_prefix(node)
    line_from = _start_line(attached[0]) if attached else _start_line(node)
    line_to = _end_line(node)
    return CodeEntity(
        name=_text(node.child_by_field_name("name")),
        signature=_function_signature(node),
        kind=CodeKind.IMPL_METHOD,
        docstring=_docstring(attached),
        line=_start_line(node.child_by_field_name("name")),
        line_from=line_from,
        line_to=line_to,
        context=_with_snippet(context, lines, line_from, line_to, enclosing_type=enclosing_type),
    )


def parse_impl(node, context: Context, lines: List[str]) -> List[CodeEntity]:
    enclosing_type = render_tokens(node.child_by_field_name("type"))
    body = node.child_by_field_name("body")
    if body is None:
        return []
    return [
        parse_method(member, enclosing_type, context, lines)
        for member in body.named_children
        if member.type == "function_item"
    ]


def parse_type_decl(node, kind: CodeKind, context: Context, lines: List[str]) -> CodeEntity:
    """Struct or enum: the span covers attached attributes and docs."""
    attached = _attached_prefix(node)
    line_from = _start_line(attached[0]) if attached else _start_line(node)
    line_to = _end_line(node)
    name_node = node.child_by_field_name("name")
    return CodeEntity(
        name=_text(name_node),
        signature=render_tokens(node),
        kind=kind,
        docstring=_docstring(attached),
        line=_start_line(name_node),
        line_from=line_from,
        line_to=line_to,
        context=_with_snippet(context, lines, line_from, line_to),
    )


def parse_fn(node, context: Context, lines: List[str]) -> CodeEntity:
    """Free function: the span runs from the name to the end of the body."""
    name_node = node.child_by_field_name("name")
    body = node.child_by_field_name("body")
    line = _start_line(name_node)
    line_to = _end_line(body) if body is not None else _end_line(node)
    return CodeEntity(
        name=_text(name_node),
        signature=_function_signature(node),
        kind=CodeKind.FUNCTION,
        docstring=_docstring(_attached_prefix(node)),
        line=line,
        line_from=line,
        line_to=line_to,
        context=_with_snippet(context, lines, line, line_to),
    )


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------

class EntityExtractor:
    """Abstract base class for code entity extraction."""

    def extract(self, root: Path) -> List[CodeEntity]:
        """Extract every entity under ``root``.

        Args:
            root: Directory to index

        Returns:
            Flat list of entities; type declarations and methods first,
            free functions after them

        Raises:
            ExtractionError: If the root, or any file under it, cannot be
                read or parsed
        """
        raise NotImplementedError


class RustEntityExtractor(EntityExtractor):
    """Extractor for Rust crates backed by the tree-sitter Rust grammar."""

    def __init__(self, extension: str = DEFAULT_EXTENSION, skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS):
        self.extension = extension
        self.skip_dirs = tuple(skip_dirs)
        self.parser = tree_sitter_language_pack.get_parser(LANGUAGE)

    def extract(self, root: Path) -> List[CodeEntity]:
        root = Path(root)
        if not root.exists():
            raise ExtractionError("Root path does not exist", path=str(root))
        if not root.is_dir():
            raise ExtractionError("Root path is not a directory", path=str(root))

        declarations: List[CodeEntity] = []
        functions: List[CodeEntity] = []
        file_count = 0

        try:
            for path in walk_source_files(root, self.extension, self.skip_dirs):
                file_decls, file_fns = self.extract_file(path, root)
                declarations.extend(file_decls)
                functions.extend(file_fns)
                file_count += 1
        except OSError as e:
            raise ExtractionError(f"Cannot walk directory: {e.strerror}", path=e.filename) from e

        logger.info(
            f"Extracted {len(declarations) + len(functions)} entities "
            f"({len(declarations)} types/methods, {len(functions)} functions) from {file_count} files"
        )
        return declarations + functions

    def extract_file(self, path: Path, root: Path) -> Tuple[List[CodeEntity], List[CodeEntity]]:
        """Parse one file into (types and methods, free functions)."""
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionError(f"Cannot read source file: {e}", path=str(path)) from e

        tree = self.parser.parse(text.encode("utf-8"))
        root_node = tree.root_node
        if root_node.has_error:
            raise ExtractionError("Source file has syntax errors", path=str(path), line=_first_error_line(root_node))

        relative = path.relative_to(root)
        context = Context(
            module=relative.parent.name,
            file_path=relative.as_posix(),
            file_name=path.name,
        )
        lines = split_lines(text)

        declarations: List[CodeEntity] = []
        functions: List[CodeEntity] = []
        for item in root_node.named_children:
            if item.type == "impl_item":
                declarations.extend(parse_impl(item, context, lines))
            elif item.type == "struct_item":
                declarations.append(parse_type_decl(item, CodeKind.STRUCT, context, lines))
            elif item.type == "enum_item":
                declarations.append(parse_type_decl(item, CodeKind.ENUM, context, lines))
            elif item.type == "function_item":
                functions.append(parse_fn(item, context, lines))

        logger.debug(f"File {relative.as_posix()}: {len(declarations)} types/methods, {len(functions)} functions")
        return declarations, functions


def extract(
    root: Path,
    extension: str = DEFAULT_EXTENSION,
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> List[CodeEntity]:
    """Extract entities from a directory (Functional Wrapper)."""
    extractor = RustEntityExtractor(extension=extension, skip_dirs=skip_dirs)
    return extractor.extract(root)

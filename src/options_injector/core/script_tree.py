"""
Script Tree: a mutable handle over parsed component script source.

The tree keeps two things in sync: the raw source bytes and the tree-sitter
parse tree built from them. All mutations are expressed as byte-range
splices. A splice is applied to a copy of the source, the copy is reparsed,
and only when the result is still free of syntax errors does the handle
switch over to it. Nodes obtained before a mutation are stale afterwards and
must be looked up again.

Presence checks (`has`) compare token streams rather than bytes, so
whitespace, comments, quote characters and optional semicolons do not
affect the outcome.
"""

from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from options_injector.core.errors import InconsistentTreeError
from options_injector.enums import ScriptLanguage

_LANGUAGES: Dict[ScriptLanguage, tree_sitter.Language] = {
  ScriptLanguage.JAVASCRIPT: tree_sitter.Language(tree_sitter_javascript.language()),
  ScriptLanguage.TYPESCRIPT: tree_sitter.Language(tree_sitter_typescript.language_typescript()),
}

# Leaves that never contribute to structural identity.
_IGNORED_LEAVES = frozenset({"comment", "html_comment", ";", "'", '"'})

Edit = Tuple[int, int, str]
NodePredicate = Callable[[tree_sitter.Node], bool]
Signature = Tuple[Tuple[str, str], ...]


class ScriptTree:
  """
  Parsed program with in-place, validated text mutations.

  Attributes:
      language (ScriptLanguage): Grammar used for parsing.
  """

  def __init__(self, source: str = "", language: Union[ScriptLanguage, str] = ScriptLanguage.JAVASCRIPT) -> None:
    """
    Parses `source` with the grammar for `language`.

    Args:
        source: Program text.
        language: 'javascript' or 'typescript'.
    """
    self.language = ScriptLanguage(language)
    self._parser = tree_sitter.Parser(_LANGUAGES[self.language])
    self._source = source.encode("utf-8")
    self._tree = self._parser.parse(self._source)

  @property
  def root(self) -> tree_sitter.Node:
    """The `program` node of the current parse."""
    return self._tree.root_node

  @property
  def source(self) -> str:
    """Current program text."""
    return self._source.decode("utf-8")

  @property
  def has_error(self) -> bool:
    """True if the current source contains syntax errors."""
    return self.root.has_error

  def text(self, node: tree_sitter.Node) -> str:
    """
    Returns the exact source text covered by `node`.

    Args:
        node: A node of the current parse.

    Returns:
        str: Decoded source slice.
    """
    return self._source[node.start_byte : node.end_byte].decode("utf-8")

  def line_indent(self, node: tree_sitter.Node) -> str:
    """
    Returns the leading whitespace of the line on which `node` starts.

    Args:
        node: A node of the current parse.

    Returns:
        str: Spaces and tabs preceding the first token of that line.
    """
    line_start = self._source.rfind(b"\n", 0, node.start_byte) + 1
    prefix = self._source[line_start : node.start_byte]
    stripped = prefix.lstrip(b" \t")
    return prefix[: len(prefix) - len(stripped)].decode("utf-8")

  def walk(self, node: Optional[tree_sitter.Node] = None) -> Iterator[tree_sitter.Node]:
    """
    Yields `node` (default: the root) and all descendants in source order.
    """
    stack = [node if node is not None else self.root]
    while stack:
      current = stack.pop()
      yield current
      stack.extend(reversed(current.children))

  def find(self, node_type: str, predicate: Optional[NodePredicate] = None) -> List[tree_sitter.Node]:
    """
    Collects all nodes of a given type, optionally filtered.

    Args:
        node_type: tree-sitter node type (e.g. 'import_statement').
        predicate: Extra condition a node must satisfy.

    Returns:
        List[Node]: Matches in source order.
    """
    return [n for n in self.walk() if n.type == node_type and (predicate is None or predicate(n))]

  def has(self, snippet: str) -> bool:
    """
    Checks whether the program structurally contains `snippet`.

    The snippet is parsed with the same grammar. It is found when some node
    has a run of consecutive children whose token streams equal those of
    the snippet's top-level statements.

    Args:
        snippet: Code to look for, e.g. a whole function declaration.

    Returns:
        bool: True if an equivalent statement sequence exists.
    """
    probe = ScriptTree(snippet, self.language)
    wanted = [probe.signature(stmt) for stmt in _significant_children(probe.root)]
    if not wanted:
      return True

    for node in self.walk():
      children = _significant_children(node)
      for i in range(len(children) - len(wanted) + 1):
        if all(self.signature(children[i + j]) == sig for j, sig in enumerate(wanted)):
          return True
    return False

  def signature(self, node: tree_sitter.Node) -> Signature:
    """
    Token stream of `node` used for structural comparison.

    Args:
        node: A node of this tree.

    Returns:
        Tuple of (leaf type, leaf text) pairs.
    """
    leaves = []
    for n in self.walk(node):
      if n.child_count == 0 and n.type not in _IGNORED_LEAVES:
        leaves.append((n.type, self.text(n)))
    return tuple(leaves)

  def splice(self, edits: Sequence[Edit]) -> "ScriptTree":
    """
    Applies non-overlapping byte-range replacements as one transaction.

    Args:
        edits: (start_byte, end_byte, replacement) triples.

    Returns:
        ScriptTree: self, for chaining.

    Raises:
        InconsistentTreeError: If the edited source no longer parses while
            the current source does. The tree is left unchanged.
    """
    data = self._source
    for start, end, replacement in sorted(edits, key=lambda e: e[0], reverse=True):
      data = data[:start] + replacement.encode("utf-8") + data[end:]

    new_tree = self._parser.parse(data)
    if new_tree.root_node.has_error and not self.root.has_error:
      raise InconsistentTreeError("Edit would produce unparseable source", data.decode("utf-8", errors="replace"))

    self._source = data
    self._tree = new_tree
    return self

  def prepend(self, code: str) -> "ScriptTree":
    """
    Inserts `code` as the first statement of the program.

    A leading hashbang line stays first.
    """
    first = self.root.children[0] if self.root.child_count else None
    if first is not None and first.type == "hash_bang_line":
      return self.splice([(first.end_byte, first.end_byte, f"\n{code}")])
    return self.splice([(0, 0, f"{code}\n")])

  def append(self, code: str) -> "ScriptTree":
    """Inserts `code` as the last statement of the program."""
    end = len(self._source)
    prefix = "" if not self._source or self._source.endswith(b"\n") else "\n"
    return self.splice([(end, end, f"{prefix}{code}\n")])

  def generate(self) -> str:
    """Serialises the tree back to source text."""
    return self.source

  def replace_by(self, other: "ScriptTree") -> "ScriptTree":
    """
    Makes this handle adopt the content of `other`.

    Args:
        other: Tree whose source and parse replace the current ones.

    Returns:
        ScriptTree: self.
    """
    self.language = other.language
    self._parser = other._parser
    self._source = other._source
    self._tree = other._tree
    return self

  def resync(self) -> "ScriptTree":
    """Reparses the generated text from scratch."""
    self._tree = self._parser.parse(self._source)
    return self

  def __repr__(self) -> str:
    return f"ScriptTree(language={self.language.value!r}, bytes={len(self._source)})"


def _significant_children(node: tree_sitter.Node) -> List[tree_sitter.Node]:
  return [c for c in node.named_children if c.type not in ("comment", "html_comment", "empty_statement")]


def parse_script(source: str, language: Union[ScriptLanguage, str] = ScriptLanguage.JAVASCRIPT) -> ScriptTree:
  """
  Default parse function used across the package.

  Args:
      source: Program text.
      language: Grammar to use.

  Returns:
      ScriptTree: The parsed tree.
  """
  return ScriptTree(source, language)

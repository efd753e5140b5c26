"""
Options Object Lookup and Entry Splicing.

Locates the default-exported options object of a component script and
provides the low-level insertion primitives used by the merger:

- `insert_entries`: adds comma-separated items to an object or array literal.
- `append_statements`: adds statements to the end of a statement block.

Both primitives read the surrounding layout (single-line or multi-line,
existing indentation, trailing commas) and emit text that matches it, so
the untouched parts of the file stay byte-identical.
"""

import textwrap
from dataclasses import dataclass
from typing import List, Optional, Sequence

import tree_sitter

from options_injector.core.errors import StructuralMismatchError
from options_injector.core.script_tree import ScriptTree
from options_injector.utils.console import log_info

DEFAULT_INDENT_UNIT = "  "

FUNCTION_VALUE_TYPES = ("function_expression", "function", "arrow_function")
_TRANSPARENT_WRAPPERS = ("parenthesized_expression", "as_expression", "satisfies_expression")
_DECLARATION_TYPES = ("lexical_declaration", "variable_declaration")
_COMMENT_TYPES = ("comment", "html_comment")


@dataclass
class Section:
  """
  One top-level key of the options object.

  Attributes:
      name: Key as written, with quotes removed.
      node: The `pair`, `method_definition` or shorthand node.
      value: The value node of a `pair`, otherwise None.
  """

  name: str
  node: tree_sitter.Node
  value: Optional[tree_sitter.Node] = None

  @property
  def function(self) -> Optional[tree_sitter.Node]:
    """The function-like node holding this section's code, if any."""
    if self.node.type == "method_definition":
      return self.node
    if self.value is not None and self.value.type in FUNCTION_VALUE_TYPES:
      return self.value
    return None


class OptionsObject:
  """
  View over the options object literal of a `ScriptTree`.

  Instances wrap nodes of one particular parse and become stale after the
  tree is mutated; call `find_options_object` again after every edit.
  """

  def __init__(self, tree: ScriptTree, node: tree_sitter.Node) -> None:
    self.tree = tree
    self.node = node

  def sections(self) -> List[Section]:
    """Returns all named keys in source order."""
    found = []
    for entry in entry_nodes(self.node):
      name = property_name(self.tree, entry)
      if name is None:
        continue
      value = entry.child_by_field_name("value") if entry.type == "pair" else None
      found.append(Section(name=name, node=entry, value=value))
    return found

  def get(self, name: str) -> Optional[Section]:
    """
    Returns the first section called `name`, or None.

    Args:
        name: Key to look up (e.g. 'data').
    """
    for section in self.sections():
      if section.name == name:
        return section
    return None

  def keys(self) -> List[str]:
    """Names of all sections, in order."""
    return [s.name for s in self.sections()]


def property_name(tree: ScriptTree, entry: tree_sitter.Node) -> Optional[str]:
  """
  Extracts the key of an object entry.

  Computed keys and spread elements have no static name.

  Args:
      tree: Owning tree.
      entry: A child of an `object` node.

  Returns:
      Optional[str]: The unquoted key, or None.
  """
  if entry.type == "shorthand_property_identifier":
    return tree.text(entry)
  if entry.type == "pair":
    key = entry.child_by_field_name("key")
  elif entry.type == "method_definition":
    key = entry.child_by_field_name("name")
  else:
    return None
  if key is None or key.type == "computed_property_name":
    return None
  return tree.text(key).strip("'\"`")


def entry_nodes(container: tree_sitter.Node) -> List[tree_sitter.Node]:
  """Named children of an object, array or block, comments excluded."""
  return [c for c in container.named_children if c.type not in _COMMENT_TYPES]


def unwrap_expression(node: Optional[tree_sitter.Node]) -> Optional[tree_sitter.Node]:
  """Strips parentheses and TypeScript `as` / `satisfies` wrappers."""
  while node is not None and node.type in _TRANSPARENT_WRAPPERS:
    node = node.named_children[0] if node.named_child_count else None
  return node


def _options_from_expression(
  tree: ScriptTree, node: Optional[tree_sitter.Node], depth: int = 0
) -> Optional[tree_sitter.Node]:
  node = unwrap_expression(node)
  if node is None or depth > 2:
    return None
  if node.type == "object":
    return node
  if node.type == "call_expression":
    # defineComponent({...}), Vue.extend({...})
    args = node.child_by_field_name("arguments")
    if args is not None:
      for arg in args.named_children:
        inner = unwrap_expression(arg)
        if inner is not None and inner.type == "object":
          return inner
    return None
  if node.type == "identifier":
    name = tree.text(node)
    for stmt in tree.root.named_children:
      if stmt.type not in _DECLARATION_TYPES:
        continue
      for declarator in stmt.named_children:
        if declarator.type != "variable_declarator":
          continue
        target = declarator.child_by_field_name("name")
        if target is not None and tree.text(target) == name:
          return _options_from_expression(tree, declarator.child_by_field_name("value"), depth + 1)
  return None


def _default_export(tree: ScriptTree) -> Optional[tree_sitter.Node]:
  for stmt in tree.root.named_children:
    if stmt.type == "export_statement" and any(c.type == "default" for c in stmt.children):
      return stmt
  return None


def find_options_object(tree: ScriptTree) -> Optional[OptionsObject]:
  """
  Locates the default-exported options object.

  Recognised forms are `export default {...}`, `export default fn({...})`
  and `export default name` where `name` is a top-level variable holding
  one of the former.

  Args:
      tree: Parsed component script.

  Returns:
      Optional[OptionsObject]: The object view, or None if there is none.
  """
  export = _default_export(tree)
  if export is None:
    return None
  value = export.child_by_field_name("value")
  if value is None:
    # `export default function () {}` and friends carry no value field.
    candidates = [c for c in export.named_children if c.type not in ("comment", "decorator")]
    value = candidates[0] if candidates else None
  node = _options_from_expression(tree, value)
  return OptionsObject(tree, node) if node is not None else None


def require_options_object(tree: ScriptTree) -> OptionsObject:
  """
  Returns the options object, creating `export default {}` when the script has none.

  Raises:
      StructuralMismatchError: If a default export exists but is not an options object.
  """
  options = find_options_object(tree)
  if options is not None:
    return options
  if _default_export(tree) is not None:
    raise StructuralMismatchError("Default export is not an options object literal")

  log_info("No options object found, creating [code]export default {}[/code]")
  tree.append("export default {}")
  options = find_options_object(tree)
  if options is None:
    raise StructuralMismatchError("Failed to create an options object")
  return options


def indent_unit(tree: ScriptTree, container: tree_sitter.Node) -> str:
  """
  Infers one indentation step from a multi-line container.

  Falls back to two spaces when the container gives no hint.
  """
  entries = entry_nodes(container)
  if entries and entries[0].start_point[0] != container.start_point[0]:
    base = tree.line_indent(container)
    inner = tree.line_indent(entries[0])
    if inner.startswith(base) and len(inner) > len(base):
      return inner[len(base) :]
  return DEFAULT_INDENT_UNIT


def reindent(code: str, indent: str) -> str:
  """
  Normalises a code fragment for insertion at `indent`.

  The fragment is dedented; every line after the first is then prefixed with
  `indent` because the first line lands after existing indentation.
  """
  lines = textwrap.dedent(code.strip("\n")).rstrip().splitlines()
  if not lines:
    return ""
  rest = [f"{indent}{line}" if line.strip() else "" for line in lines[1:]]
  return "\n".join([lines[0].lstrip(), *rest])


def _trailing_comma(entry: tree_sitter.Node) -> Optional[tree_sitter.Node]:
  sibling = entry.next_sibling
  while sibling is not None and sibling.type in _COMMENT_TYPES:
    sibling = sibling.next_sibling
  return sibling if sibling is not None and sibling.type == "," else None


def _skip_comments(node: tree_sitter.Node) -> tree_sitter.Node:
  """Last comment directly following `node`, or `node` itself."""
  while node.next_sibling is not None and node.next_sibling.type in _COMMENT_TYPES:
    node = node.next_sibling
  return node


def insert_entries(
  tree: ScriptTree, container: tree_sitter.Node, items: Sequence[str], at_start: bool = False
) -> ScriptTree:
  """
  Inserts items into an object or array literal.

  Items keep their given order. Multi-line containers get one item per line
  at the indentation of the existing entries. Empty objects are expanded to
  multi-line form with trailing commas; arrays stay on one line.

  Args:
      tree: Owning tree, mutated in place.
      container: An `object` or `array` node of the current parse.
      items: Entry sources, e.g. ``"foo: 1"`` or ``"mounted() {}"``.
      at_start: Insert before existing entries instead of after them.

  Returns:
      ScriptTree: The mutated tree.
  """
  if not items:
    return tree

  entries = entry_nodes(container)
  open_tok, close_tok = container.children[0], container.children[-1]
  base = tree.line_indent(container)
  unit = indent_unit(tree, container)
  multiline = bool(entries) and entries[0].start_point[0] != container.start_point[0]
  indent = tree.line_indent(entries[0]) if multiline else base + unit
  rendered = [reindent(item, indent) for item in items]

  if not entries:
    if container.type == "array":
      return tree.splice([(close_tok.start_byte, close_tok.start_byte, ", ".join(rendered))])
    block = "".join(f"\n{indent}{r}," for r in rendered) + f"\n{base}"
    inner = tree.text(container)[len(tree.text(open_tok)) : -len(tree.text(close_tok))]
    if inner.strip():
      return tree.splice([(close_tok.start_byte, close_tok.start_byte, block)])
    return tree.splice([(open_tok.end_byte, close_tok.start_byte, block)])

  if at_start:
    sep = f",\n{indent}" if multiline else ", "
    text = "".join(f"{r}{sep}" for r in rendered)
    return tree.splice([(entries[0].start_byte, entries[0].start_byte, text)])

  last = entries[-1]
  comma = _trailing_comma(last)
  anchor = _skip_comments(comma if comma is not None else last)
  line_comment = anchor.type in _COMMENT_TYPES and tree.text(anchor).startswith("//")
  lead = f"\n{indent}" if multiline or line_comment else " "
  if comma is not None:
    text = "".join(f"{lead}{r}," for r in rendered)
    return tree.splice([(anchor.end_byte, anchor.end_byte, text)])
  text = lead + f",{lead}".join(rendered)
  if anchor.end_byte == last.end_byte:
    return tree.splice([(last.end_byte, last.end_byte, f",{text}")])
  # The separating comma goes right after the entry, the items after its comments.
  return tree.splice([(last.end_byte, last.end_byte, ","), (anchor.end_byte, anchor.end_byte, text)])


def append_statements(tree: ScriptTree, block: tree_sitter.Node, code: str) -> ScriptTree:
  """
  Appends `code` as the last statement(s) of a `statement_block`.

  Args:
      tree: Owning tree, mutated in place.
      block: A `statement_block` node of the current parse.
      code: Statement source.

  Returns:
      ScriptTree: The mutated tree.
  """
  open_tok, close_tok = block.children[0], block.children[-1]
  statements = entry_nodes(block)
  base = tree.line_indent(block)

  if not statements:
    indent = base + DEFAULT_INDENT_UNIT
    return tree.splice([(open_tok.end_byte, close_tok.start_byte, f"\n{indent}{reindent(code, indent)}\n{base}")])

  last = statements[-1]
  last_text = tree.text(last).rstrip()
  if statements[0].start_point[0] == block.start_point[0]:
    sep = " " if last_text.endswith(";") else "; "
    return tree.splice([(last.end_byte, last.end_byte, f"{sep}{reindent(code, base)}")])

  # Insert after any trailing comment so it stays attached to its statement.
  anchor = block.children[-2]
  indent = tree.line_indent(statements[0])
  snippet = reindent(code, indent)
  if snippet[:1] in ("(", "[", "`") and not last_text.endswith(";"):
    snippet = f";{snippet}"
  return tree.splice([(anchor.end_byte, anchor.end_byte, f"\n{indent}{snippet}")])

"""
Object-Section Merger.

Each operation decides whether its target section already exists on the
options object and then either extends it or creates it:

=================  ==================  ===============  ====================
Section            Existing            Absent           Repeated identical
=================  ==================  ===============  ====================
lifecycle hook     append statement    add as last key  duplicated
data / components  append entries      add as first key duplicated
methods            prepend method      add, then insert duplicated
mixins             append if missing   add as first key unchanged
=================  ==================  ===============  ====================

Only mixins are content-aware. Repeated data, component or method keys are
written again; callers are expected not to inject the same key twice.

All operations mutate the given `ScriptTree` in place and return it.
"""

import textwrap
from typing import List, Mapping, Optional

import tree_sitter
from rich.markup import escape

from options_injector.config import InjectorConfig
from options_injector.core.dsl import InjectionRequest
from options_injector.core.errors import StructuralMismatchError
from options_injector.core.imports import ensure_namespace_import
from options_injector.core.options_object import (
  DEFAULT_INDENT_UNIT,
  Section,
  append_statements,
  entry_nodes,
  insert_entries,
  require_options_object,
  unwrap_expression,
)
from options_injector.core.script_tree import ScriptTree
from options_injector.enums import SectionKind
from options_injector.utils.console import log_info, log_warning

KEYED_BLOCKS = ("data", "components")


def render_entries(entries: Mapping[str, str]) -> List[str]:
  """
  Renders a key -> value-source mapping as object entries.

  A key equal to its value becomes shorthand (``{ Foo }``).

  Args:
      entries: Keys and JavaScript expression sources, in insertion order.

  Returns:
      List[str]: One source string per entry.
  """
  return [key if key == value else f"{key}: {value}" for key, value in entries.items()]


def _indent_lines(code: str, indent: str) -> str:
  return "\n".join(f"{indent}{line}" if line.strip() else "" for line in code.splitlines())


def _render_function(header: str, body: str) -> str:
  body = textwrap.dedent(body.strip("\n"))
  if not body.strip():
    return f"{header} {{}}"
  return f"{header} {{\n{_indent_lines(body, DEFAULT_INDENT_UNIT)}\n}}"


def _render_object(prefix: str, items: List[str]) -> str:
  inner = "\n".join(f"{_indent_lines(item, DEFAULT_INDENT_UNIT)}," for item in items)
  return f"{prefix}{{\n{inner}\n}}"


def _hook_body(section: Section) -> Optional[tree_sitter.Node]:
  fn = section.function
  if fn is None:
    return None
  params = fn.child_by_field_name("parameters")
  if params is None:
    # Arrow function with a single bare parameter.
    params = fn.child_by_field_name("parameter")
    if params is not None:
      return None
  elif params.named_child_count:
    return None
  body = fn.child_by_field_name("body")
  return body if body is not None and body.type == "statement_block" else None


def _returned_object(block: tree_sitter.Node) -> Optional[tree_sitter.Node]:
  for stmt in reversed(entry_nodes(block)):
    if stmt.type != "return_statement":
      continue
    value = unwrap_expression(stmt.named_children[0]) if stmt.named_child_count else None
    return value if value is not None and value.type == "object" else None
  return None


def _data_object(section: Section) -> Optional[tree_sitter.Node]:
  value = unwrap_expression(section.value)
  if value is not None and value.type == "object":
    return value
  fn = section.function
  if fn is None:
    return None
  body = unwrap_expression(fn.child_by_field_name("body"))
  if body is None:
    return None
  if body.type == "object":
    return body
  if body.type == "statement_block":
    return _returned_object(body)
  return None


def _object_value(section: Section) -> Optional[tree_sitter.Node]:
  value = unwrap_expression(section.value)
  return value if value is not None and value.type == "object" else None


def merge_hook(tree: ScriptTree, hook_name: str, code: str) -> ScriptTree:
  """
  Adds `code` to a lifecycle hook.

  An existing parameterless hook (method, function or arrow-with-block
  form) gets `code` appended as its last statement and stays where it is.
  A missing hook is added as `hook_name() { code }`, the last key of the
  object. A same-named key of any other shape is an error.

  Args:
      tree: Component script, mutated in place.
      hook_name: Hook key, e.g. 'mounted'.
      code: Statement source to run inside the hook.

  Returns:
      ScriptTree: The same tree.

  Raises:
      StructuralMismatchError: If `hook_name` exists in an unsupported shape.
          The tree is left unchanged.
  """
  options = require_options_object(tree)
  section = options.get(hook_name)

  if section is None:
    insert_entries(tree, options.node, [_render_function(f"{hook_name}()", code)])
    log_info(f"Created hook [code]{escape(hook_name)}[/code]")
    return tree

  body = _hook_body(section)
  if body is None:
    raise StructuralMismatchError(
      f"Hook '{hook_name}' exists but is not a parameterless function with a block body"
    )

  append_statements(tree, body, code)
  log_info(f"Extended hook [code]{escape(hook_name)}[/code]")
  return tree


def merge_keyed_block(tree: ScriptTree, block_name: str, entries: Mapping[str, str]) -> ScriptTree:
  """
  Adds entries to the `data` or `components` block.

  Existing blocks receive the entries after their current ones. A missing
  block is created as the first key of the object. Keys already present are
  not detected and will appear twice.

  Args:
      tree: Component script, mutated in place.
      block_name: 'data' or 'components'.
      entries: Key -> value-source mapping; equal key and value give shorthand.

  Returns:
      ScriptTree: The same tree.

  Raises:
      ValueError: If `block_name` is not a keyed block.
  """
  if block_name not in KEYED_BLOCKS:
    raise ValueError(f"Unsupported keyed block: '{block_name}'. Expected one of {KEYED_BLOCKS}")

  items = render_entries(entries)
  if not items:
    return tree

  options = require_options_object(tree)
  section = options.get(block_name)

  if section is None:
    if block_name == "data":
      snippet = _render_function("data()", _render_object("return ", items))
    else:
      snippet = _render_object(f"{block_name}: ", items)
    insert_entries(tree, options.node, [snippet], at_start=True)
    log_info(f"Created [code]{block_name}[/code] with {len(items)} entries")
    return tree

  target = _data_object(section) if block_name == "data" else _object_value(section)
  if target is None:
    log_warning(f"'{block_name}' is not an object literal (or does not return one), leaving it untouched")
    return tree

  insert_entries(tree, target, items)
  log_info(f"Added {len(items)} entries to [code]{block_name}[/code]")
  return tree


def merge_data(tree: ScriptTree, entries: Mapping[str, str]) -> ScriptTree:
  """Shortcut for ``merge_keyed_block(tree, 'data', entries)``."""
  return merge_keyed_block(tree, "data", entries)


def merge_components(tree: ScriptTree, entries: Mapping[str, str]) -> ScriptTree:
  """Shortcut for ``merge_keyed_block(tree, 'components', entries)``."""
  return merge_keyed_block(tree, "components", entries)


def _ensure_methods_block(tree: ScriptTree) -> Optional[tree_sitter.Node]:
  options = require_options_object(tree)
  if options.get("methods") is None:
    insert_entries(tree, options.node, ["methods: {}"], at_start=True)
    options = require_options_object(tree)
  section = options.get("methods")
  return _object_value(section) if section is not None else None


def merge_method(tree: ScriptTree, method_code: str) -> ScriptTree:
  """
  Inserts a method as the first entry of `methods`.

  The block is created first when missing; the insertion itself always
  happens, so repeated calls produce repeated methods.

  Args:
      tree: Component script, mutated in place.
      method_code: Method source, e.g. ``"reset() { this.x = 0 }"``.

  Returns:
      ScriptTree: The same tree.
  """
  return _insert_methods(tree, [method_code])


def merge_methods(tree: ScriptTree, entries: Mapping[str, str]) -> ScriptTree:
  """
  Inserts ``name: function-source`` entries at the front of `methods`.

  Entries keep their mapping order relative to each other.

  Args:
      tree: Component script, mutated in place.
      entries: Method name -> function expression source.

  Returns:
      ScriptTree: The same tree.
  """
  return _insert_methods(tree, render_entries(entries))


def _insert_methods(tree: ScriptTree, items: List[str]) -> ScriptTree:
  if not items:
    return tree
  methods = _ensure_methods_block(tree)
  if methods is None:
    log_warning("'methods' is not an object literal, leaving it untouched")
    return tree
  insert_entries(tree, methods, items, at_start=True)
  log_info(f"Added {len(items)} method(s)")
  return tree


def merge_mixin(tree: ScriptTree, mixin_identifier: str) -> ScriptTree:
  """
  Adds a mixin to the `mixins` array unless it is already listed.

  Args:
      tree: Component script, mutated in place.
      mixin_identifier: Expression naming the mixin, compared by exact text.

  Returns:
      ScriptTree: The same tree.
  """
  options = require_options_object(tree)
  section = options.get("mixins")

  if section is None:
    insert_entries(tree, options.node, [f"mixins: [{mixin_identifier}]"], at_start=True)
    log_info(f"Created [code]mixins[/code] with {escape(mixin_identifier)}")
    return tree

  array = unwrap_expression(section.value)
  if array is None or array.type != "array":
    log_warning("'mixins' is not an array literal, leaving it untouched")
    return tree

  if any(tree.text(el) == mixin_identifier for el in entry_nodes(array)):
    return tree

  insert_entries(tree, array, [mixin_identifier])
  log_info(f"Added mixin {escape(mixin_identifier)}")
  return tree


def apply_injection(tree: ScriptTree, request: InjectionRequest, config: Optional[InjectorConfig] = None) -> ScriptTree:
  """
  Dispatches an `InjectionRequest` to the matching merge operation.

  Args:
      tree: Component script, mutated in place.
      request: Validated request.
      config: Supplies the framework package and fallback binding for
          namespace import requests.

  Returns:
      ScriptTree: The same tree.
  """
  kind = request.kind
  if kind == SectionKind.HOOK:
    return merge_hook(tree, request.target, request.code)
  if kind in (SectionKind.DATA, SectionKind.COMPONENTS):
    return merge_keyed_block(tree, kind.value, request.entries)
  if kind == SectionKind.METHOD:
    if request.code is not None:
      return merge_method(tree, request.code)
    return merge_methods(tree, request.entries)
  if kind == SectionKind.MIXIN:
    return merge_mixin(tree, request.identifier)
  config = config or InjectorConfig()
  return ensure_namespace_import(tree, package=config.framework_package, default_name=config.namespace_name)

"""
Framework Import Handling.

Finds the local name bound to the framework module and normalises its
import into namespace form (``import * as Vue from 'vue'``).
"""

from typing import List, Optional

import tree_sitter

from options_injector.config import DEFAULT_FRAMEWORK_PACKAGE, DEFAULT_NAMESPACE_NAME
from options_injector.core.errors import BindingLookupError, InjectorError
from options_injector.core.script_tree import ScriptTree
from options_injector.utils.console import log_info


def _string_value(tree: ScriptTree, node: tree_sitter.Node) -> str:
  return tree.text(node)[1:-1]


def framework_imports(tree: ScriptTree, package: str = DEFAULT_FRAMEWORK_PACKAGE) -> List[tree_sitter.Node]:
  """
  Top-level import statements whose module specifier is `package`.

  Args:
      tree: Component script.
      package: Module specifier, e.g. 'vue'.

  Returns:
      List[Node]: Matching `import_statement` nodes in source order.
  """
  found = []
  for stmt in tree.root.named_children:
    if stmt.type != "import_statement":
      continue
    source = stmt.child_by_field_name("source")
    if source is not None and _string_value(tree, source) == package:
      found.append(stmt)
  return found


def _clause(stmt: tree_sitter.Node) -> Optional[tree_sitter.Node]:
  # `import type X from 'vue'` binds a type only.
  if any(c.type == "type" for c in stmt.children):
    return None
  for child in stmt.named_children:
    if child.type == "import_clause":
      return child
  return None


def _child_of_type(node: tree_sitter.Node, node_type: str) -> Optional[tree_sitter.Node]:
  for child in node.named_children:
    if child.type == node_type:
      return child
  return None


def _namespace_binding(clause: tree_sitter.Node) -> Optional[tree_sitter.Node]:
  ns = _child_of_type(clause, "namespace_import")
  return _child_of_type(ns, "identifier") if ns is not None else None


def has_namespace_import(tree: ScriptTree, package: str = DEFAULT_FRAMEWORK_PACKAGE) -> bool:
  """True if `import * as X from package` is present."""
  for stmt in framework_imports(tree, package):
    clause = _clause(stmt)
    if clause is not None and _namespace_binding(clause) is not None:
      return True
  return False


def lookup_namespace_binding(tree: ScriptTree, package: str = DEFAULT_FRAMEWORK_PACKAGE) -> str:
  """
  Returns the local name of the framework import.

  The default import (``import Vue from 'vue'``) wins; an existing namespace
  import is used otherwise.

  Args:
      tree: Component script.
      package: Module specifier.

  Returns:
      str: The bound identifier.

  Raises:
      BindingLookupError: If neither import form is present.
  """
  namespace = None
  for stmt in framework_imports(tree, package):
    clause = _clause(stmt)
    if clause is None:
      continue
    default = _child_of_type(clause, "identifier")
    if default is not None:
      return tree.text(default)
    namespace = namespace or _namespace_binding(clause)

  if namespace is not None:
    return tree.text(namespace)
  raise BindingLookupError(f"No default or namespace import from '{package}'")


def get_namespace_binding_name(
  tree: ScriptTree,
  package: str = DEFAULT_FRAMEWORK_PACKAGE,
  default_name: str = DEFAULT_NAMESPACE_NAME,
) -> str:
  """
  Like `lookup_namespace_binding`, but falls back to `default_name`.

  Never raises an `InjectorError`.
  """
  try:
    return lookup_namespace_binding(tree, package)
  except InjectorError:
    return default_name


def ensure_namespace_import(
  tree: ScriptTree,
  package: str = DEFAULT_FRAMEWORK_PACKAGE,
  default_name: str = DEFAULT_NAMESPACE_NAME,
) -> ScriptTree:
  """
  Normalises the framework import to namespace form.

  ``import Vue from 'vue'`` becomes ``import * as Vue from 'vue'``. A mixed
  ``import Vue, { ref } from 'vue'`` is split into a namespace import and a
  named import. When no namespace import exists afterwards,
  ``import * as <default_name> from '<package>';`` is prepended.

  Args:
      tree: Component script, mutated in place.
      package: Module specifier.
      default_name: Binding used for a newly created import.

  Returns:
      ScriptTree: The same tree.
  """
  edits = []
  for stmt in framework_imports(tree, package):
    clause = _clause(stmt)
    if clause is None or _namespace_binding(clause) is not None:
      continue
    default = _child_of_type(clause, "identifier")
    if default is None:
      continue

    source = tree.text(stmt.child_by_field_name("source"))
    semi = ";" if tree.text(stmt).rstrip().endswith(";") else ""
    replacement = f"import * as {tree.text(default)} from {source}{semi}"
    named = _child_of_type(clause, "named_imports")
    if named is not None:
      replacement += f"\n{tree.line_indent(stmt)}import {tree.text(named)} from {source}{semi}"
    edits.append((stmt.start_byte, stmt.end_byte, replacement))

  if edits:
    tree.splice(edits)
    log_info(f"Rewrote {len(edits)} '{package}' import(s) to namespace form")

  if not has_namespace_import(tree, package):
    tree.prepend(f"import * as {default_name} from '{package}';")
    log_info(f"Added namespace import for '{package}'")
  return tree

"""
Small helpers shared by transform steps built on top of the injector.
"""

import re
from typing import Callable, List, Sequence, Tuple, Union

import tree_sitter

from options_injector.core.script_tree import NodePredicate, ScriptTree

Rule = Union[str, Tuple[str, NodePredicate]]


def to_camel_case(name: str) -> str:
  """
  Converts kebab-case to camelCase.

  Args:
      name: e.g. 'el-date-picker'.

  Returns:
      str: e.g. 'elDatePicker'.
  """
  return re.sub(r"-([a-z])", lambda m: m.group(1).upper(), name)


def find_any_of(tree: ScriptTree, rules: Sequence[Rule]) -> List[tree_sitter.Node]:
  """
  Returns the matches of the first rule that matches anything.

  Args:
      tree: Tree to search.
      rules: Node types, or (node type, predicate) pairs, tried in order.

  Returns:
      List[Node]: Matches of the first successful rule, or an empty list.
  """
  for rule in rules:
    node_type, predicate = (rule, None) if isinstance(rule, str) else rule
    found = tree.find(node_type, predicate)
    if found:
      return found
  return []


def force_replace(
  parse_fn: Callable[[str], ScriptTree],
  tree: ScriptTree,
  mutate: Callable[[ScriptTree], object],
) -> ScriptTree:
  """
  Regenerates and reparses `tree`, applies `mutate` to the fresh copy and
  swaps the result into `tree`.

  Used to recover when a tree might be out of sync with its text.

  Args:
      parse_fn: Parser producing a new tree from source text.
      tree: Handle to update in place.
      mutate: Edit applied to the freshly parsed copy.

  Returns:
      ScriptTree: `tree`, now holding the mutated copy.
  """
  fresh = parse_fn(tree.generate())
  mutate(fresh)
  return tree.replace_by(fresh)

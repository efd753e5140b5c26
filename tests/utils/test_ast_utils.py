"""
Tests for the shared tree helpers.
"""

import pytest

from options_injector.core.script_tree import ScriptTree
from options_injector.utils.ast_utils import find_any_of, force_replace, to_camel_case


@pytest.mark.parametrize(
  "name, expected",
  [
    ("el-date-picker", "elDatePicker"),
    ("button", "button"),
    ("already-camelCase", "alreadyCamelCase"),
    ("x-1", "x-1"),
  ],
)
def test_to_camel_case(name, expected):
  assert to_camel_case(name) == expected


def test_find_any_of_uses_first_matching_rule():
  tree = ScriptTree("const a = 1\nlet b = 2\n")
  found = find_any_of(tree, ["class_declaration", "lexical_declaration", "identifier"])
  assert [tree.text(n) for n in found] == ["const a = 1", "let b = 2"]


def test_find_any_of_with_predicate():
  tree = ScriptTree("foo()\nbar()\n")
  rules = [
    ("call_expression", lambda n: tree.text(n).startswith("baz")),
    ("call_expression", lambda n: tree.text(n).startswith("bar")),
  ]
  assert [tree.text(n) for n in find_any_of(tree, rules)] == ["bar()"]


def test_find_any_of_no_match():
  assert find_any_of(ScriptTree("1"), ["class_declaration"]) == []


def test_force_replace_mutates_fresh_copy():
  tree = ScriptTree("a()\n")

  def mutate(fresh):
    fresh.append("b()")

  result = force_replace(ScriptTree, tree, mutate)
  assert result is tree
  assert tree.generate() == "a()\nb()\n"
  assert not tree.has_error

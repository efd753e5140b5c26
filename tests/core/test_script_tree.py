"""
Tests for the ScriptTree wrapper.

Verifies:
1. Parsing JavaScript and TypeScript sources.
2. Structural presence checks (`has`) ignoring layout, quotes and semicolons.
3. Transactional splicing that rejects edits breaking the syntax.
4. Program-level prepend/append and the replace/resync recovery helpers.
"""

import pytest

from options_injector.core.errors import InconsistentTreeError
from options_injector.core.script_tree import ScriptTree, parse_script
from options_injector.enums import ScriptLanguage


def test_parse_round_trips_source():
  src = "const a = 1 // keep\nexport default {}\n"
  tree = parse_script(src)
  assert tree.generate() == src
  assert tree.root.type == "program"
  assert not tree.has_error


def test_typescript_grammar():
  tree = parse_script("const a: number = 1\nexport default {} as Options\n", "typescript")
  assert tree.language == ScriptLanguage.TYPESCRIPT
  assert not tree.has_error


def test_find_with_predicate():
  tree = ScriptTree("import a from 'a'\nimport b from 'b'\n")
  found = tree.find("import_statement", lambda n: "'b'" in tree.text(n))
  assert len(found) == 1
  assert tree.text(found[0]) == "import b from 'b'"


def test_has_ignores_whitespace_quotes_and_semicolons():
  tree = ScriptTree('function f(a) {\n  return "x";\n}\n')
  assert tree.has("function f(a){ return 'x' }")
  assert not tree.has("function f(b){ return 'x' }")
  assert not tree.has("function g(a){ return 'x' }")


def test_has_finds_nested_statement_runs():
  tree = ScriptTree("function f() {\n  a()\n  b()\n  c()\n}\n")
  assert tree.has("b(); c()")
  assert not tree.has("a(); c()")


def test_has_empty_snippet_is_trivially_present():
  assert ScriptTree("").has("")


def test_splice_applies_multiple_edits():
  tree = ScriptTree("const a = 1\nconst b = 2\n")
  tree.splice([(6, 7, "x"), (18, 19, "y")])
  assert tree.generate() == "const x = 1\nconst y = 2\n"


def test_splice_rejects_broken_result():
  src = "const a = 1\n"
  tree = ScriptTree(src)

  with pytest.raises(InconsistentTreeError):
    tree.splice([(0, 0, "(((")])

  assert tree.generate() == src
  assert not tree.has_error


def test_prepend_and_append():
  tree = ScriptTree("const a = 1")
  tree.prepend("import x from 'x'")
  tree.append("export default {}")
  assert tree.generate() == "import x from 'x'\nconst a = 1\nexport default {}\n"


def test_prepend_keeps_hashbang_first():
  tree = ScriptTree("#!/usr/bin/env node\nrun()\n")
  tree.prepend("import x from 'x'")
  assert tree.generate().startswith("#!/usr/bin/env node\nimport x from 'x'\n")


def test_append_to_empty_program():
  tree = ScriptTree("")
  tree.append("function f() {}")
  assert tree.generate() == "function f() {}\n"


def test_line_indent():
  tree = ScriptTree("export default {\n    a: 1,\n}\n")
  pair = tree.find("pair")[0]
  assert tree.line_indent(pair) == "    "


def test_replace_by_adopts_other_tree():
  tree = ScriptTree("const a = 1\n")
  other = ScriptTree("let b: string = 'x'\n", "typescript")
  result = tree.replace_by(other)
  assert result is tree
  assert tree.generate() == "let b: string = 'x'\n"
  assert tree.language == ScriptLanguage.TYPESCRIPT


def test_resync_keeps_text():
  tree = ScriptTree("const a = 1\n")
  assert tree.resync().generate() == "const a = 1\n"
  assert tree.root.named_child_count == 1

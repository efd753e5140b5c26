"""
Tests for the Utility Module Manager.

Verifies:
1. Helper files are created on demand, including missing directories.
2. Structurally equivalent functions are not added twice.
3. Import specifiers are relative, extension-less and './'-prefixed.
4. Formatting failures leave the file untouched.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from options_injector.config import InjectorConfig
from options_injector.core.errors import FormattingError
from options_injector.tools.formatter import NullFormatter, SourceFormatter
from options_injector.tools.utility_module import UtilityModuleManager, _lock_for, ensure_utility_function

HELPER = "function toArray(value) {\n  return [].concat(value)\n}"


class BrokenFormatter(SourceFormatter):
  def _format(self, source, options):
    raise FormattingError("boom")


@pytest.fixture(autouse=True)
def quiet(captured_console):
  return captured_console


@pytest.fixture
def manager():
  return UtilityModuleManager(formatter=NullFormatter())


def test_creates_file_and_directories(tmp_path, manager):
  specifier = manager.ensure_function(HELPER, tmp_path / "dist", tmp_path / "dist" / "App.vue")
  target = tmp_path / "dist" / "utils" / "gogocodeTransfer.js"
  assert specifier == "./gogocodeTransfer"
  assert target.read_text() == HELPER + "\n"


def test_equivalent_function_not_duplicated(tmp_path, manager):
  out = tmp_path / "dist"
  manager.ensure_function(HELPER, out, out / "App.vue")
  manager.ensure_function(HELPER.replace("\n  ", "\n    "), out, out / "App.vue")
  content = (out / "utils" / "gogocodeTransfer.js").read_text()
  assert content.count("function toArray") == 1


def test_different_functions_accumulate(tmp_path, manager):
  out = tmp_path / "dist"
  manager.ensure_function(HELPER, out, out / "App.vue")
  manager.ensure_function("function noop() {}", out, out / "App.vue")
  content = (out / "utils" / "gogocodeTransfer.js").read_text()
  assert content.index("toArray") < content.index("noop")


def test_existing_content_preserved(tmp_path, manager):
  utils = tmp_path / "dist" / "utils"
  utils.mkdir(parents=True)
  (utils / "gogocodeTransfer.js").write_text("export const VERSION = 1\n")
  manager.ensure_function(HELPER, tmp_path / "dist", tmp_path / "dist" / "App.vue")
  assert (utils / "gogocodeTransfer.js").read_text().startswith("export const VERSION = 1\n")


@pytest.mark.parametrize(
  "consumer, expected",
  [
    ("dist/src/App.js", "../utils/helpers"),
    ("dist/App.js", "./utils/helpers"),
    ("dist/utils/other.js", "./helpers"),
  ],
)
def test_named_file_specifier(tmp_path, manager, consumer, expected):
  specifier = manager.ensure_function(HELPER, tmp_path / "dist", tmp_path / consumer, file_name="helpers.js")
  assert specifier == expected
  assert (tmp_path / "dist" / "utils" / "helpers.js").is_file()


def test_file_like_output_root(tmp_path, manager):
  path = manager.resolve_path(tmp_path / "dist" / "index.js")
  assert path == (tmp_path / "dist" / "utils" / "gogocodeTransfer.js").resolve()


def test_existing_directory_with_dot_is_a_directory(tmp_path, manager):
  root = tmp_path / "out.v2"
  root.mkdir()
  assert manager.resolve_path(root) == root.resolve() / "utils" / "gogocodeTransfer.js"


def test_formatting_failure_skips_write(tmp_path, captured_console):
  manager = UtilityModuleManager(formatter=BrokenFormatter())
  specifier = manager.ensure_function(HELPER, tmp_path, tmp_path / "App.vue")
  assert specifier == "./gogocodeTransfer"
  assert not (tmp_path / "utils" / "gogocodeTransfer.js").exists()
  assert "boom" in captured_console.getvalue()


def test_typescript_helper(tmp_path, manager):
  helper = "function double(x: number): number {\n  return x * 2\n}"
  manager.ensure_function(helper, tmp_path, tmp_path / "App.ts", file_name="helpers.ts")
  manager.ensure_function(helper, tmp_path, tmp_path / "App.ts", file_name="helpers.ts")
  assert (tmp_path / "utils" / "helpers.ts").read_text().count("function double") == 1


def test_concurrent_updates_to_same_file(tmp_path, manager):
  def add(_):
    return manager.ensure_function(HELPER, tmp_path, tmp_path / "App.vue")

  with ThreadPoolExecutor(max_workers=8) as pool:
    results = list(pool.map(add, range(16)))

  assert set(results) == {"./gogocodeTransfer"}
  assert (tmp_path / "utils" / "gogocodeTransfer.js").read_text().count("function toArray") == 1


def test_from_config(tmp_path):
  config = InjectorConfig(formatter="none", utility_file_name="helpers.js")
  manager = UtilityModuleManager.from_config(config)
  assert isinstance(manager.formatter, NullFormatter)
  assert manager.ensure_function(HELPER, tmp_path, tmp_path / "App.vue") == "./utils/helpers"
  assert (tmp_path / "utils" / "helpers.js").is_file()


@pytest.mark.parametrize(
  "consumer, expected",
  [
    ("dist/App.js", "./utils/helpers"),
    ("dist/src/App.js", "../utils/helpers"),
    ("dist/src/deep/App.js", "../../utils/helpers"),
  ],
)
def test_configured_file_name_uses_relative_path(tmp_path, consumer, expected):
  manager = UtilityModuleManager.from_config(InjectorConfig(formatter="none", utility_file_name="helpers.js"))
  assert manager.ensure_function("function f() {}", tmp_path / "dist", tmp_path / consumer) == expected


@pytest.mark.parametrize(
  "consumer",
  ["dist/App.vue", "dist/src/App.vue", "dist/src/a/b/App.vue", "elsewhere/App.vue"],
)
def test_default_file_specifier_ignores_consumer_depth(tmp_path, manager, consumer):
  specifier = manager.ensure_function(HELPER, tmp_path / "dist", tmp_path / consumer)
  assert specifier == "./gogocodeTransfer"


def test_functional_shortcut(tmp_path):
  specifier = ensure_utility_function(None, HELPER, tmp_path, tmp_path / "App.vue", formatter=NullFormatter())
  assert specifier == "./gogocodeTransfer"
  assert "toArray" in (tmp_path / "utils" / "gogocodeTransfer.js").read_text()


def test_default_formatter_output_is_written(tmp_path):
  ensure_utility_function(None, "function  f( ){return 1}", tmp_path, tmp_path / "App.vue")
  content = (tmp_path / "utils" / "gogocodeTransfer.js").read_text()
  assert "function f()" in content
  assert content.endswith("\n")


def test_lock_registry_reuses_lock_per_path(tmp_path):
  target = tmp_path / "utils" / "gogocodeTransfer.js"
  assert _lock_for(target) is _lock_for(target)
  assert _lock_for(target) is not _lock_for(tmp_path / "utils" / "other.js")

"""
Tests for the source formatter backends.
"""

import pytest

from options_injector.config import FormatterOptions
from options_injector.core.errors import FormattingError
from options_injector.enums import FormatterBackend, TrailingComma
from options_injector.tools.formatter import (
  BeautifierFormatter,
  NullFormatter,
  PrettierFormatter,
  SourceFormatter,
  get_formatter,
)


class TruncatingFormatter(SourceFormatter):
  def _format(self, source, options):
    return source[: len(source) // 2]


def test_null_formatter_is_identity():
  src = "const a = {b:1}\n"
  assert NullFormatter().format(src) == src


def test_beautifier_applies_tab_width():
  out = BeautifierFormatter().format("function f(){return 1}", FormatterOptions(tab_width=4))
  assert out == "function f() {\n    return 1\n}\n"


def test_invalid_output_rejected():
  with pytest.raises(FormattingError):
    TruncatingFormatter().format("function f() {\n  return 1\n}\n")


def test_invalid_input_passes_through():
  assert NullFormatter().format("function (") == "function ("


def test_prettier_args_cover_all_options():
  opts = FormatterOptions(
    tab_width=4,
    single_quote=False,
    semi=True,
    trailing_comma=TrailingComma.ALL,
    print_width=100,
    parser="javascript",
  )
  args = PrettierFormatter(command=["prettier"]).build_args(opts)
  assert args == [
    "prettier",
    "--parser",
    "babel",
    "--tab-width",
    "4",
    "--print-width",
    "100",
    "--trailing-comma",
    "all",
  ]


def test_prettier_default_style_flags():
  args = PrettierFormatter().build_args(FormatterOptions())
  assert args[:3] == ["npx", "--no-install", "prettier"]
  assert "--single-quote" in args and "--no-semi" in args
  assert args[args.index("--parser") + 1] == "typescript"


def test_prettier_missing_binary(tmp_path):
  formatter = PrettierFormatter(command=[str(tmp_path / "no-such-prettier")])
  with pytest.raises(FormattingError):
    formatter.format("const a = 1\n")


@pytest.mark.parametrize(
  "backend, cls",
  [
    (FormatterBackend.JSBEAUTIFIER, BeautifierFormatter),
    ("prettier", PrettierFormatter),
    ("none", NullFormatter),
  ],
)
def test_get_formatter(backend, cls):
  assert isinstance(get_formatter(backend), cls)


def test_get_formatter_unknown():
  with pytest.raises(ValueError):
    get_formatter("black")

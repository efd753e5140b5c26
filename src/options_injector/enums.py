"""
Enumerations for options-injector.

This module defines the section kinds an injection can target and the
options accepted by the source formatters.
"""

from enum import Enum


class SectionKind(str, Enum):
  """
  Target of a single injection request.

  Used by :class:`~options_injector.core.dsl.InjectionRequest` to route a
  request to the matching merge operation.
  """

  HOOK = "hook"
  DATA = "data"
  COMPONENTS = "components"
  METHOD = "method"
  MIXIN = "mixin"
  NAMESPACE_IMPORT = "namespace_import"


class ScriptLanguage(str, Enum):
  """Grammars understood by the script parser."""

  JAVASCRIPT = "javascript"
  TYPESCRIPT = "typescript"


class TrailingComma(str, Enum):
  """Trailing comma policy passed to the formatter."""

  NONE = "none"
  ES5 = "es5"
  ALL = "all"


class FormatterBackend(str, Enum):
  """Available source formatter implementations."""

  JSBEAUTIFIER = "jsbeautifier"
  PRETTIER = "prettier"
  NONE = "none"

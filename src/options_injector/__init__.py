"""
options-injector Package.

Structural code injection for component definitions written as an
"Options API" object literal. Sections of the default-exported object
(lifecycle hooks, ``data``, ``components``, ``methods``, ``mixins``) and the
framework namespace import are extended in place while the rest of the
source stays byte-for-byte identical.

Usage
-----

.. code-block:: python

    import options_injector as oi

    tree = oi.parse_script("export default { mounted() { a() } }")
    oi.merge_hook(tree, "mounted", "b()")
    print(tree.generate())
    # export default { mounted() { a(); b() } }

    specifier = oi.ensure_utility_function(
      None, "function f() {}", "dist/src", "dist/src/App.js"
    )
"""

from options_injector.config import FormatterOptions, InjectorConfig
from options_injector.core.dsl import InjectionRequest
from options_injector.core.errors import (
  BindingLookupError,
  FormattingError,
  InconsistentTreeError,
  InjectorError,
  StructuralMismatchError,
)
from options_injector.core.imports import (
  ensure_namespace_import,
  get_namespace_binding_name,
  lookup_namespace_binding,
)
from options_injector.core.merger import (
  apply_injection,
  merge_components,
  merge_data,
  merge_hook,
  merge_keyed_block,
  merge_method,
  merge_methods,
  merge_mixin,
)
from options_injector.core.options_object import find_options_object
from options_injector.core.script_tree import ScriptTree, parse_script
from options_injector.enums import SectionKind
from options_injector.tools.utility_module import UtilityModuleManager, ensure_utility_function

__version__ = "0.1.0"

__all__ = [
  "BindingLookupError",
  "FormatterOptions",
  "FormattingError",
  "InconsistentTreeError",
  "InjectionRequest",
  "InjectorConfig",
  "InjectorError",
  "ScriptTree",
  "SectionKind",
  "StructuralMismatchError",
  "UtilityModuleManager",
  "__version__",
  "apply_injection",
  "ensure_namespace_import",
  "ensure_utility_function",
  "find_options_object",
  "get_namespace_binding_name",
  "lookup_namespace_binding",
  "merge_components",
  "merge_data",
  "merge_hook",
  "merge_keyed_block",
  "merge_method",
  "merge_methods",
  "merge_mixin",
  "parse_script",
]

"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- A captured console fixture for asserting on log output.
- Common component script samples.
"""

import io
import sys
from pathlib import Path

import pytest
from rich.console import Console

# Add src to path so we can import 'options_injector' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from options_injector.core.script_tree import ScriptTree  # noqa: E402
from options_injector.utils.console import reset_console, set_console  # noqa: E402


@pytest.fixture
def captured_console():
  """
  Routes all injector logging into an in-memory console.

  Yields the buffer; read it with ``buffer.getvalue()``.
  """
  buffer = io.StringIO()
  set_console(Console(file=buffer, width=200, force_terminal=False, color_system=None))
  yield buffer
  reset_console()


@pytest.fixture
def parse():
  """Returns a JavaScript parse helper."""
  return lambda source: ScriptTree(source)


@pytest.fixture
def multiline_component() -> str:
  """A typical component written across several lines."""
  return """import Vue from 'vue'

export default {
  name: 'Demo',
  props: ['value'],
  mounted() {
    this.init()
  },
}
"""

"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local tagnav package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of tagnav modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("tagnav"):
        del sys.modules[module_name]


FOO_COMPONENT = """\
import { Component, EventEmitter, Input, Output } from '@angular/core';

@Component({
  selector: 'app-foo',
  templateUrl: './foo.component.html',
})
export class FooComponent {
  @Input() value: string;
  @Output() changed = new EventEmitter<string>();
}
"""

BAR_COMPONENT = """\
import { Component, Input } from '@angular/core';

@Component({ selector: 'app-bar' })
export class BarComponent {
  @Input() label = '';
}
"""


@pytest.fixture(scope="session")
def ts_parser():
    """TypeScript parser handle from the installed grammar wheel."""
    from tagnav.index._internal.parsing import load_grammar

    return load_grammar("typescript")


@pytest.fixture(scope="session")
def html_parser():
    """HTML parser handle from the installed grammar wheel."""
    from tagnav.index._internal.parsing import load_grammar

    return load_grammar("html")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A workspace with two components under src/ and noise elsewhere."""
    app = tmp_path / "src" / "app"
    app.mkdir(parents=True)
    (app / "foo.component.ts").write_text(FOO_COMPONENT)
    (app / "bar.component.ts").write_text(BAR_COMPONENT)
    (app / "foo.component.html").write_text("<app-bar></app-bar>\n")

    vendored = tmp_path / "src" / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "lib.component.ts").write_text(
        FOO_COMPONENT.replace("app-foo", "lib-foo").replace("FooComponent", "LibComponent")
    )
    (tmp_path / "other.component.ts").write_text(BAR_COMPONENT.replace("app-bar", "app-root"))
    return tmp_path


@pytest.fixture
def sample_sources() -> dict[str, str]:
    """Component sources keyed by short name."""
    return {"foo": FOO_COMPONENT, "bar": BAR_COMPONENT}

"""Shared test fixtures for cudblank tests."""

import logging
import sys
import textwrap
from pathlib import Path

import pytest

MODULE = "github.com/hashicorp/terraform-provider-azurerm"


class _StdoutHandler(logging.Handler):
    """A handler that always writes to the *current* sys.stdout.

    Unlike StreamHandler(sys.stdout), this resolves sys.stdout at emit-time
    so it works with pytest's capsys fixture.
    """

    def emit(self, record):
        try:
            msg = self.format(record)
            sys.stdout.write(msg + "\n")
            sys.stdout.flush()
        except Exception:
            self.handleError(record)


@pytest.fixture(autouse=True)
def _setup_logging():
    """Route all cudblank loggers to stdout so capsys can capture them."""
    handler = _StdoutHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger("cudblank")
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)
    root_logger.propagate = False

    yield

    root_logger.removeHandler(handler)


# ============================================
# Miniature provider module
# ============================================

GO_MOD = f"""\
module {MODULE}

go 1.21
"""

PLUGINSDK = """\
package pluginsdk

import "context"

type ResourceData struct {
	id string
}

func (d *ResourceData) Id() string {
	return d.id
}

type CreateFunc func(context.Context, *ResourceData, interface{}) error

type ReadFunc func(context.Context, *ResourceData, interface{}) error

type Schema struct {
	Required bool
}

type Resource struct {
	Create CreateFunc
	Read   ReadFunc
	Update CreateFunc
	Delete CreateFunc
	Schema map[string]*Schema
}
"""

SDK = """\
package sdk

import "context"

type ResourceMetaData struct {
	ResourceData interface{}
}

type ResourceRunFunc func(ctx context.Context, metadata ResourceMetaData) error

type ResourceFunc struct {
	Func    ResourceRunFunc
	Timeout int
}
"""

FOO_RESOURCE = f"""\
package foo

import (
	"context"
	"fmt"

	"{MODULE}/internal/tf/pluginsdk"
)

func resourceFoo() *pluginsdk.Resource {{
	return &pluginsdk.Resource{{
		Create: resourceFooCreate,
		Read:   resourceFooRead,
		Update: resourceFooUpdate,
		Delete: resourceFooDelete,
		Schema: map[string]*pluginsdk.Schema{{
			"name": {{
				Required: true,
			}},
		}},
	}}
}}

func resourceFooCreate(ctx context.Context, d *pluginsdk.ResourceData, meta interface{{}}) error {{
	return fmt.Errorf("creating foo %s", d.Id())
}}

func resourceFooRead(ctx context.Context, d *pluginsdk.ResourceData, meta interface{{}}) error {{
	return fmt.Errorf("reading foo %s", d.Id())
}}

func resourceFooUpdate(ctx context.Context, d *pluginsdk.ResourceData, meta interface{{}}) error {{
	return fmt.Errorf("updating foo %s", d.Id())
}}

func resourceFooDelete(ctx context.Context, d *pluginsdk.ResourceData, meta interface{{}}) error {{
	return fmt.Errorf("deleting foo %s", d.Id())
}}
"""

BAR_RESOURCE = f"""\
package bar

import (
	"context"
	"fmt"

	"{MODULE}/internal/sdk"
)

type BarResource struct{{}}

func (r BarResource) Create() sdk.ResourceFunc {{
	return sdk.ResourceFunc{{
		Timeout: 30,
		Func: func(ctx context.Context, metadata sdk.ResourceMetaData) error {{
			return fmt.Errorf("creating bar")
		}},
	}}
}}

func (r BarResource) Read() sdk.ResourceFunc {{
	return sdk.ResourceFunc{{
		Timeout: 5,
		Func: func(ctx context.Context, metadata sdk.ResourceMetaData) error {{
			return fmt.Errorf("reading bar")
		}},
	}}
}}
"""

BASE_FILES = {
    "go.mod": GO_MOD,
    "internal/tf/pluginsdk/resource.go": PLUGINSDK,
    "internal/sdk/resource.go": SDK,
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content))
    return root


@pytest.fixture
def make_project(tmp_path):
    """Build a provider module in tmp_path from the base files plus extras."""

    def _make(files: dict[str, str] | None = None, base: bool = True) -> Path:
        tree = dict(BASE_FILES) if base else {}
        tree.update(files or {})
        return write_tree(tmp_path, tree)

    return _make


@pytest.fixture
def provider(make_project):
    """Module with one field-assignment and one named-method service."""
    return make_project({
        "internal/services/foo/foo_resource.go": FOO_RESOURCE,
        "internal/services/bar/bar_resource.go": BAR_RESOURCE,
    })


@pytest.fixture
def config():
    """Defaults with formatting disabled so output is byte-predictable."""
    return {"packages": "./internal/...", "formatter": None, "dry_run": False}


@pytest.fixture
def module_path():
    return MODULE

"""Fixed match targets and terminal colours.

The two match patterns are constants of the tool, not configuration.
Package paths are relative to the module path declared in go.mod.
"""

# Colors for terminal output
RED = "\033[0;31m"
YELLOW = "\033[1;33m"
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
NC = "\033[0m"  # No Color

DEFAULT_SELECTOR = "./internal/..."
SERVICES_PREFIX = "internal/services/"

# Convention A: func resourceFoo() *pluginsdk.Resource { ... Create: fooCreate ... }
PLUGINSDK_PACKAGE = "internal/tf/pluginsdk"
PLUGINSDK_FUNC_TYPE = "CreateFunc"
PLUGINSDK_DESCRIPTOR = "Resource"
LIFECYCLE_KEYS = frozenset({"Create", "Update", "Delete"})

# Convention B: func (r FooResource) Create() sdk.ResourceFunc { ... Func: ... }
SDK_PACKAGE = "internal/sdk"
SDK_FUNC_TYPE = "ResourceRunFunc"
SDK_OPERATION = "ResourceFunc"
LIFECYCLE_METHODS = frozenset({"Create", "Update", "Delete"})
SDK_FUNC_KEY = "Func"

SENTINEL = "nil"

FIELD_ASSIGNMENT = "field-assignment"
NAMED_METHOD = "named-method"


def package_path(module_path: str, relative: str) -> str:
    """Join the go.mod module path with a module-relative package path."""
    return f"{module_path.rstrip('/')}/{relative.strip('/')}"

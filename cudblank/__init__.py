"""
cudblank - blank out Terraform provider lifecycle functions.

Finds every create/update/delete function wired into a resource, under
both the plugin-SDK field style and the typed-SDK method style, and
replaces it with a no-op.
"""

__version__ = "1.0.0"

from .errors import (
    ConfigError,
    CudblankError,
    LoadError,
    ResolutionError,
    SerializeError,
    SignatureError,
    WriteError,
)
from .runner import RunReport, run

__all__ = [
    "run",
    "RunReport",
    "CudblankError",
    "ConfigError",
    "LoadError",
    "SignatureError",
    "ResolutionError",
    "WriteError",
    "SerializeError",
    "__version__",
]

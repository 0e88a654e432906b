"""Exception hierarchy for cudblank.

Every failure is fatal: errors propagate to the CLI, which prints a single
message naming the phase and exits non-zero.
"""


class CudblankError(Exception):
    """Base class for all cudblank failures."""

    phase = "run"

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class ConfigError(CudblankError):
    """cudblank.yaml is malformed or holds unsupported values."""

    phase = "config"


class LoadError(CudblankError):
    """The Go sources could not be discovered or parsed."""

    phase = "load"


class SignatureError(CudblankError):
    """A reference function type is missing or is not a function type."""

    phase = "discovery"


class ResolutionError(CudblankError):
    """A matched reference does not bind to a function declaration."""

    phase = "resolve"


class WriteError(CudblankError):
    """A rewritten file could not be opened for writing."""

    phase = "write"


class SerializeError(CudblankError):
    """The formatter rejected a rewritten file."""

    phase = "write"

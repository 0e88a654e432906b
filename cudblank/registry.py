"""Reference function signatures, computed once per run."""

import logging
from dataclasses import dataclass

from .errors import SignatureError
from .golang import Project, TypeResolver
from .golang.gotypes import GoType, Pointer, Signature
from .targets import (
    PLUGINSDK_DESCRIPTOR,
    PLUGINSDK_FUNC_TYPE,
    PLUGINSDK_PACKAGE,
    SDK_FUNC_TYPE,
    SDK_OPERATION,
    SDK_PACKAGE,
    package_path,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureRegistry:
    """Target fingerprints plus the result types that gate each convention."""

    field_assignment: Signature
    named_method: Signature
    descriptor_type: GoType
    operation_type: GoType


def lookup_signature(project: Project, resolver: TypeResolver, package: str, name: str) -> Signature:
    """Underlying function signature of the type ``name`` declared in ``package``."""
    pkg = project.package(package)
    if pkg is None:
        raise SignatureError(f"reference package {package} was not loaded")
    if name not in pkg.types:
        raise SignatureError(f"{name} is not declared in {package}")

    spec_file, spec = pkg.types[name]
    underlying = resolver.resolve_type(spec_file, spec.child_by_field_name("type"))
    if not isinstance(underlying, Signature):
        raise SignatureError(f"{package}.{name} is not a function type", str(spec_file.path))
    return underlying


def build_registry(project: Project, resolver: TypeResolver) -> SignatureRegistry:
    pluginsdk = package_path(project.module_path, PLUGINSDK_PACKAGE)
    sdk = package_path(project.module_path, SDK_PACKAGE)

    registry = SignatureRegistry(
        field_assignment=lookup_signature(project, resolver, pluginsdk, PLUGINSDK_FUNC_TYPE),
        named_method=lookup_signature(project, resolver, sdk, SDK_FUNC_TYPE),
        descriptor_type=Pointer(resolver.named_type(pluginsdk, PLUGINSDK_DESCRIPTOR)),
        operation_type=resolver.named_type(sdk, SDK_OPERATION),
    )
    logger.debug("%s = %s", PLUGINSDK_FUNC_TYPE, registry.field_assignment)
    logger.debug("%s = %s", SDK_FUNC_TYPE, registry.named_method)
    return registry

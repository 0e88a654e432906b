"""Tests for cudblank.registry - reference signature discovery."""

import pytest

from cudblank.errors import SignatureError
from cudblank.golang import TypeResolver, load_project
from cudblank.golang.gotypes import Basic, Named, Pointer, Signature
from cudblank.registry import build_registry, lookup_signature


def _load(root):
    project = load_project(root, "./internal/...")
    return project, TypeResolver(project)


class TestBuildRegistry:

    def test_both_signatures_resolved(self, make_project, module_path):
        project, resolver = _load(make_project())
        registry = build_registry(project, resolver)

        sdk = f"{module_path}/internal/sdk"
        pluginsdk = f"{module_path}/internal/tf/pluginsdk"
        assert registry.named_method == Signature(
            params=(Named("context", "Context"), Named(sdk, "ResourceMetaData")),
            results=(Basic("error"),),
        )
        assert len(registry.field_assignment.params) == 3
        assert registry.descriptor_type == Pointer(Named(pluginsdk, "Resource"))
        assert registry.operation_type == Named(sdk, "ResourceFunc")

    def test_registry_is_immutable(self, make_project):
        project, resolver = _load(make_project())
        registry = build_registry(project, resolver)
        with pytest.raises(AttributeError):
            registry.field_assignment = None

    def test_alias_declaration_is_accepted(self, make_project, module_path):
        root = make_project({
            "internal/sdk/resource.go": """\
                package sdk

                import "context"

                type ResourceMetaData struct{}

                type ResourceRunFunc = func(ctx context.Context, metadata ResourceMetaData) error

                type ResourceFunc struct {
                    Func ResourceRunFunc
                }
            """,
        })
        project, resolver = _load(root)
        registry = build_registry(project, resolver)
        assert registry.named_method.results == (Basic("error"),)


class TestLookupFailures:

    def test_missing_reference_package(self, make_project, module_path):
        root = make_project()
        project = load_project(root, "./internal/sdk")
        with pytest.raises(SignatureError, match="was not loaded"):
            build_registry(project, TypeResolver(project))

    def test_missing_name(self, make_project, module_path):
        project, resolver = _load(make_project())
        with pytest.raises(SignatureError, match="NoSuchFunc is not declared"):
            lookup_signature(project, resolver, f"{module_path}/internal/sdk", "NoSuchFunc")

    def test_not_a_function_type(self, make_project, module_path):
        project, resolver = _load(make_project())
        with pytest.raises(SignatureError, match="is not a function type") as exc_info:
            lookup_signature(project, resolver, f"{module_path}/internal/sdk", "ResourceFunc")
        assert exc_info.value.phase == "discovery"


class TestAliasedDescriptor:

    def test_descriptor_alias_is_followed(self, make_project, module_path):
        root = make_project({
            "internal/tf/pluginsdk/resource.go": """\
                package pluginsdk

                import (
                    "context"

                    "github.com/hashicorp/terraform-plugin-sdk/v2/helper/schema"
                )

                type Resource = schema.Resource

                type ResourceData = schema.ResourceData

                type CreateFunc func(context.Context, *ResourceData, interface{}) error
            """,
        })
        project, resolver = _load(root)
        registry = build_registry(project, resolver)

        schema = "github.com/hashicorp/terraform-plugin-sdk/v2/helper/schema"
        assert registry.descriptor_type == Pointer(Named(schema, "Resource"))
        assert registry.field_assignment.params[1] == Pointer(Named(schema, "ResourceData"))

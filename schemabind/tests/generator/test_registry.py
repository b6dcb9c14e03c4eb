"""Tests for the type registry."""

import pytest

from schemabind.generator import TypeRegistry, parse
from schemabind.generator.errors import UnknownTypeError, ValidationError

HIERARCHY = """
type ManagedEntity {}
type Folder : ManagedEntity { name: string }
type ComputeResource : ManagedEntity { summary?: string }
type ClusterComputeResource : ComputeResource { drs: bool }
type Datastore : ManagedEntity {}
enum PowerState { poweredOn poweredOff }
"""


def registry_for(text):
    return TypeRegistry(parse(text).types)


def describe_classification():
    def classifies_scenario(expect, scenario):
        _, registry = scenario
        expect([t.name for t in registry.enums()]) == ["Alpha"]
        expect([t.name for t in registry.composites()]) == ["Gamma", "Beta"]
        expect(registry.is_polymorphic_base("Gamma")) == True
        expect(registry.is_polymorphic_base("Beta")) == False
        expect(registry.is_abstract("Gamma")) == True
        expect(registry.interface_names()) == ["Gamma"]

    def finds_transitive_bases(expect):
        registry = registry_for(HIERARCHY)
        expect(registry.ancestors("ClusterComputeResource")) == (
            "ComputeResource",
            "ManagedEntity",
        )
        expect(registry.interface_names()) == ["ComputeResource", "ManagedEntity"]

    def never_classifies_leaves_as_interfaces(expect):
        registry = registry_for(HIERARCHY)
        for name in ["Folder", "ClusterComputeResource", "Datastore", "PowerState"]:
            expect(registry.is_polymorphic_base(name)) == False

    def treats_bases_with_fields_as_concrete(expect):
        registry = registry_for(HIERARCHY)
        expect(registry.is_abstract("ComputeResource")) == False
        expect(registry.is_abstract("ManagedEntity")) == True

    def treats_empty_leaves_as_concrete(expect):
        expect(registry_for(HIERARCHY).is_abstract("Datastore")) == False

    def ignores_unregistered_bases(expect):
        registry = registry_for("type PbmProfile : ManagedEntity { name: string }")
        expect(registry.interface_names()) == []
        expect(registry.ancestors("PbmProfile")) == ()

    def rejects_inheritance_cycles(expect):
        with pytest.raises(ValidationError):
            registry_for("type A : B {}\ntype B : A {}")


def describe_interfaces():
    def lists_concrete_implementers(expect):
        registry = registry_for(HIERARCHY)
        expect(registry.interface("ManagedEntity").implementers) == (
            "ClusterComputeResource",
            "ComputeResource",
            "Datastore",
            "Folder",
        )
        expect(registry.interface("ComputeResource").implementers) == (
            "ClusterComputeResource",
            "ComputeResource",
        )

    def every_interface_has_a_deriving_type(expect):
        registry = registry_for(HIERARCHY)
        for name in registry.interface_names():
            derived = [t for t in registry.types if name in registry.ancestors(t.name)]
            expect(len(derived) > 0) == True

    def reports_implemented_interfaces(expect):
        registry = registry_for(HIERARCHY)
        expect(registry.implements("ClusterComputeResource")) == [
            "ComputeResource",
            "ManagedEntity",
        ]
        expect(registry.implements("ComputeResource")) == ["ComputeResource", "ManagedEntity"]
        expect(registry.implements("ManagedEntity")) == []
        expect(registry.implements("PowerState")) == []

    def rejects_interface_query_for_leaf(expect):
        with pytest.raises(UnknownTypeError):
            registry_for(HIERARCHY).interface("Folder")


def describe_registration():
    def keeps_first_declaration(expect):
        registry = registry_for("type Epsilon { a: string }\ntype Epsilon { b: string }")
        expect(len(registry)) == 1
        expect(registry.lookup("Epsilon").fields[0].name) == "a"

    def accepts_identical_redeclaration(expect):
        registry = registry_for("type Epsilon { id: string }\ntype Epsilon { id: string }")
        expect(len(registry)) == 1
        expect("Epsilon" in registry) == True

    def rejects_unknown_names(expect):
        registry = registry_for(HIERARCHY)
        with pytest.raises(UnknownTypeError):
            registry.lookup("Missing")
        with pytest.raises(UnknownTypeError):
            registry.is_polymorphic_base("Missing")

    def summarizes(expect):
        expect(registry_for(HIERARCHY).summary()) == {"types": 6, "enums": 1, "interfaces": 2}

"""Tests for target resolution and schema loading."""

import pytest

from schemabind.generator import load, resolve_target
from schemabind.generator.errors import ConfigurationError, ValidationError


def describe_resolve_target():
    def resolves_root_target(expect):
        target = resolve_target("vim")
        expect(target.is_root) == True
        expect(target.package) == "vim25"
        expect(target.types_import) == "github.com/vmware/govmomi/vim25/types"

    def resolves_other_targets(expect):
        target = resolve_target("pbm", module="example.com/bindings/")
        expect(target.is_root) == False
        expect(target.package) == "pbm"
        expect(target.types_import) == "example.com/bindings/pbm/types"
        expect(target.root_types_import) == "example.com/bindings/vim25/types"
        expect(target.soap_import) == "example.com/bindings/vim25/soap"

    def rejects_invalid_names(expect):
        with pytest.raises(ConfigurationError):
            resolve_target("../vim")


def describe_load():
    def loads_and_merges_overlay(expect, schema_dir):
        schema = load(resolve_target("vim"), schema_dir)
        delta = next(t for t in schema.types if t.name == "Delta")
        expect([f.name for f in delta.fields]) == ["x", "y"]
        expect(delta.fields[1].type) == "long"

    def keeps_duplicate_declarations(expect, schema_dir):
        schema = load(resolve_target("vim"), schema_dir)
        expect([t.name for t in schema.types].count("Epsilon")) == 2

    def uses_declared_namespace(expect, schema_dir):
        expect(load(resolve_target("vim"), schema_dir).namespace) == "urn:vim25"

    def defaults_namespace(expect, tmp_path):
        (tmp_path / "eam.schema").write_text("type Agent { name: string }")
        expect(load(resolve_target("eam"), tmp_path).namespace) == "urn:eam"

    def works_without_overlay(expect, schema_dir):
        schema = load(resolve_target("pbm"), schema_dir)
        expect([t.name for t in schema.types]) == ["PbmProfileCategory", "PbmProfile"]

    def reads_overlay_from_explicit_dir(expect, schema_dir, tmp_path):
        (tmp_path / "vim.yaml").write_text(
            "components:\n"
            "  schemas:\n"
            "    Delta:\n"
            "      properties:\n"
            "        z:\n"
            "          type: boolean\n"
        )
        schema = load(resolve_target("vim"), schema_dir, overlay_dir=tmp_path)
        delta = next(t for t in schema.types if t.name == "Delta")
        expect([f.name for f in delta.fields]) == ["x", "z"]

    def fails_for_missing_schema(expect, tmp_path):
        with pytest.raises(ConfigurationError) as exc:
            load(resolve_target("vim"), tmp_path)
        expect("vim.schema" in str(exc.value)) == True

    def resolves_references_for_root_target(expect, tmp_path):
        (tmp_path / "vim.schema").write_text("type T : ManagedEntity {}")
        with pytest.raises(ValidationError):
            load(resolve_target("vim"), tmp_path)

    def allows_root_references_for_other_targets(expect, tmp_path):
        (tmp_path / "pbm.schema").write_text("type T : ManagedEntity {}")
        schema = load(resolve_target("pbm"), tmp_path)
        expect(schema.types[0].base) == "ManagedEntity"

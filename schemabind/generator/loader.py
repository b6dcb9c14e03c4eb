"""Target resolution and schema loading."""

import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import ConfigurationError
from .overlay import load_overlay, merge
from .parser import read, validate_assumptions
from .types import Schema

logger = logging.getLogger(__name__)

DEFAULT_MODULE = "github.com/vmware/govmomi"

ROOT_TARGET = "vim"
ROOT_PACKAGE = "vim25"

SCHEMA_SUFFIX = ".schema"
OVERLAY_SUFFIX = ".yaml"

_TARGET_NAME = re.compile(r"^[a-z][a-z0-9_]*$")


@dataclass(frozen=True)
class TargetConfig:
    """Output conventions for one generation target."""

    name: str
    is_root: bool
    package: str
    module: str = DEFAULT_MODULE

    @property
    def types_import(self) -> str:
        """Import path of this target's own types package."""
        return f"{self.module}/{self.package}/types"

    @property
    def root_types_import(self) -> str:
        return f"{self.module}/{ROOT_PACKAGE}/types"

    @property
    def soap_import(self) -> str:
        return f"{self.module}/{ROOT_PACKAGE}/soap"


# Targets with conventions that differ from the default of "package = name".
TARGET_POLICIES: dict[str, dict[str, object]] = {
    ROOT_TARGET: {"is_root": True, "package": ROOT_PACKAGE},
}


def resolve_target(name: str, module: str = DEFAULT_MODULE) -> TargetConfig:
    """Resolve a target name to its output conventions."""
    if not _TARGET_NAME.match(name):
        raise ConfigurationError(f"Invalid target name: {name!r}")

    policy = TARGET_POLICIES.get(name, {})
    return TargetConfig(
        name=name,
        is_root=bool(policy.get("is_root", False)),
        package=str(policy.get("package", name)),
        module=module.rstrip("/"),
    )


def load(target: TargetConfig, schema_dir: Path, overlay_dir: Path | None = None) -> Schema:
    """Load the primary schema for a target and merge its overlay, if any.

    The overlay directory defaults to `<schema_dir>/sdk`.
    """
    schema_path = Path(schema_dir) / f"{target.name}{SCHEMA_SUFFIX}"
    if not schema_path.is_file():
        raise ConfigurationError(f"No schema for target {target.name}: {schema_path} not found")

    schema = read(schema_path)
    logger.debug(
        "Read %d types and %d operations from %s",
        len(schema.types),
        len(schema.operations),
        schema_path,
    )

    if overlay_dir is None:
        overlay_dir = Path(schema_dir) / "sdk"
    overlay = load_overlay(Path(overlay_dir) / f"{target.name}{OVERLAY_SUFFIX}")
    schema = merge(schema, overlay)

    if schema.namespace is None:
        schema = replace(schema, namespace=f"urn:{target.package}")

    validate_assumptions(schema, resolve_references=target.is_root)
    return schema

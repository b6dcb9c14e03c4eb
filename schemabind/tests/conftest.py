"""Unit tests configuration file."""

from pathlib import Path

import pytest

from schemabind.generator import TypeRegistry, parse

SCHEMA_DIR = Path(__file__).parent / "generator" / "schemas"

SCENARIO = """
enum Alpha { A B }
type Gamma {}
type Beta : Gamma { x: string }
operation DoThing(Beta) -> Alpha
"""


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def schema_dir():
    return SCHEMA_DIR


@pytest.fixture
def scenario():
    schema = parse(SCENARIO)
    return schema, TypeRegistry(schema.types)

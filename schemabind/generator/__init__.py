"""schemabind binding generator."""

from .errors import *
from .loader import TargetConfig as TargetConfig
from .loader import load as load
from .loader import resolve_target as resolve_target
from .ordering import Partition as Partition
from .ordering import ordered as ordered
from .ordering import partition as partition
from .parser import parse as parse
from .parser import read as read
from .parser import validate_assumptions as validate_assumptions
from .registry import Interface as Interface
from .registry import TypeRegistry as TypeRegistry
from .types import *

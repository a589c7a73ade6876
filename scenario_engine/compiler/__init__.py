from .blocks import BlockRegistry
from .compile import CompiledProgram, compile_scenario
from .validate import validate_conditionals, validate_references

"""
regoscope - Rego policy engine wrapper with rule inventories.

regoscope wraps an external Rego evaluation engine (regorus) and adds one
thing the engine does not provide: an inventory of the rules in each loaded
policy, with descriptions taken from the comment above each rule and the
line range each rule occupies. The inventory drives policy documentation and
maps engine coverage back onto individual rules.

Example usage:
    $ regoscope rules policies/*.rego
    $ regoscope eval data.authz.allow --policy authz.rego --input input.json
    $ regoscope coverage data.authz.allow --policy authz.rego --input input.json
"""

__version__ = "0.1.0"
__author__ = "regoscope Contributors"

from regoscope.engine import Engine
from regoscope.errors import (
    EngineError,
    EvalError,
    JsonError,
    ParseError,
    RegoscopeError,
)
from regoscope.scanner import extract, extract_all
from regoscope.schema import UNDEFINED, CoverageReport, RuleRecord

__all__ = [
    "__version__",
    "__author__",
    "Engine",
    "EngineError",
    "EvalError",
    "JsonError",
    "ParseError",
    "RegoscopeError",
    "extract",
    "extract_all",
    "UNDEFINED",
    "CoverageReport",
    "RuleRecord",
]

"""
Evaluation engine backends for regoscope.

regoscope delegates all Rego parsing and evaluation to an external engine.
This module defines the Backend interface and the regorus implementation.

Usage:
    from regoscope.backend import RegorusBackend

    backend = RegorusBackend()
    backend.add_policy("authz.rego", source)
"""

from regoscope.backend.base import Backend
from regoscope.backend.regorus import RegorusBackend

__all__ = [
    "Backend",
    "RegorusBackend",
]

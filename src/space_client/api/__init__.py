"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Remote SPACE API modules.
"""

from .contracts import ContractModule
from .features import READ_ONLY_EVALUATION_TTL_S, FeatureModule
from .services import ServiceModule

__all__ = [
    "ContractModule",
    "FeatureModule",
    "ServiceModule",
    "READ_ONLY_EVALUATION_TTL_S",
]

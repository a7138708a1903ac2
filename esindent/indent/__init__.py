"""
Indentation layer — offset graph construction and resolution.

- OffsetRegistry: token -> (base token, multiplier) relationships
- ConstructRules: per-construct handlers that fill the registry
- OffsetResolver: turns the registry into per-line indent levels
"""

from .offsets import OffsetEntry, OffsetRegistry
from .rules import ConstructRules
from .resolver import OffsetResolver

__all__ = [
    'OffsetEntry',
    'OffsetRegistry',
    'ConstructRules',
    'OffsetResolver',
]

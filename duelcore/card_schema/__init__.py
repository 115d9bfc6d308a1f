"""Card schema - templates, effect descriptors and catalog validation."""

from .templates import (
    CardKind,
    Attribute,
    TriggerKind,
    EffectKind,
    TargetSide,
    Selection,
    EffectDescriptor,
    CardTemplate,
    CardCatalog,
    UnknownCardError,
)
from .validation import validate_catalog, validate_deck, CatalogValidationError

__all__ = [
    "CardKind",
    "Attribute",
    "TriggerKind",
    "EffectKind",
    "TargetSide",
    "Selection",
    "EffectDescriptor",
    "CardTemplate",
    "CardCatalog",
    "UnknownCardError",
    "validate_catalog",
    "validate_deck",
    "CatalogValidationError",
]

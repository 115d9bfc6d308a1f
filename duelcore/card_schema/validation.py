"""
Catalog Validation - Schema validation for card templates.

Validates that:
1. Required fields are present
2. Monster stats are in range
3. Spells only carry spell effects, traps only trap effects
4. Traps declare a trigger
5. Decks only reference known templates
"""

from __future__ import annotations
from dataclasses import dataclass

from .templates import (
    CardCatalog,
    CardTemplate,
    CardKind,
    EffectDescriptor,
    EffectKind,
    SPELL_EFFECTS,
    TRAP_EFFECTS,
)


MAX_LEVEL = 12


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: CardCatalog, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate every template in a catalog.

    Returns ValidationResult with errors and warnings.
    Raises CatalogValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for template in catalog.all():
        errors.extend(_validate_template(template))

    if not any(t.is_monster for t in catalog.all()):
        warnings.append("No monsters defined - matches cannot deal battle damage")

    if errors and raise_on_error:
        raise CatalogValidationError(errors)

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def validate_deck(catalog: CardCatalog, deck: list[str]) -> list[str]:
    """Return errors for deck entries that are not in the catalog."""
    return [
        f"Deck references unknown card '{template_id}'"
        for template_id in deck
        if template_id not in catalog
    ]


def _validate_template(template: CardTemplate) -> list[str]:
    """Validate a single card template."""
    errors = []
    if not template.template_id:
        errors.append("Card has empty template_id")
    if not template.name:
        errors.append(f"Card '{template.template_id}' has empty name")

    if template.kind == CardKind.MONSTER:
        if not 1 <= template.level <= MAX_LEVEL:
            errors.append(f"Monster '{template.template_id}' has level {template.level} outside 1..{MAX_LEVEL}")
        if template.atk < 0 or template.defense < 0:
            errors.append(f"Monster '{template.template_id}' has negative stats")
        if template.effects:
            errors.append(f"Monster '{template.template_id}' cannot carry effects")

    elif template.kind == CardKind.SPELL:
        if not template.effects:
            errors.append(f"Spell '{template.template_id}' has no effects")
        for effect in template.effects:
            if effect.kind not in SPELL_EFFECTS:
                errors.append(f"Spell '{template.template_id}' uses trap effect {effect.kind.value}")
            errors.extend(_validate_effect(template.template_id, effect))

    elif template.kind == CardKind.TRAP:
        if template.trigger is None:
            errors.append(f"Trap '{template.template_id}' has no trigger")
        if not template.effects:
            errors.append(f"Trap '{template.template_id}' has no effects")
        for effect in template.effects:
            if effect.kind not in TRAP_EFFECTS:
                errors.append(f"Trap '{template.template_id}' uses spell effect {effect.kind.value}")
            errors.extend(_validate_effect(template.template_id, effect))

    return errors


def _validate_effect(card_id: str, effect: EffectDescriptor) -> list[str]:
    """Validate descriptor parameters."""
    errors = []
    if effect.amount < 0:
        errors.append(f"Card '{card_id}': {effect.kind.value} has negative amount")
    if effect.duration is not None and effect.duration < 1:
        errors.append(f"Card '{card_id}': boost duration must be >= 1 or permanent")
    if effect.kind == EffectKind.REFLECT_DAMAGE and effect.percent < 0:
        errors.append(f"Card '{card_id}': reflect percent must be >= 0")
    if effect.atk_threshold is not None and effect.atk_threshold < 0:
        errors.append(f"Card '{card_id}': atk_threshold must be >= 0")
    return errors

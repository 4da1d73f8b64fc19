"""
Règles concrètes de validation des fichiers glossaire CSV.

Chaque module expose ses fonctions `validate_*` / `fix_*`, sa recette
et une règle prête à enregistrer (`UNIT`).
"""

from typing import Optional

from ..checks.registry import CheckRegistry, default_registry
from . import (
    allowed_columns_header,
    at_least_two_lines,
    duplicate_header_cells,
    duplicate_term_values,
    invalid_flags,
    lowercase_header,
    no_empty_lines,
    no_empty_term_values,
    no_header_spaces,
    non_empty_file,
    orphan_locale_descriptions,
    semicolon_separators,
    term_description_header,
    valid_encoding,
    valid_extension,
)

ALL_UNITS = [
    valid_extension.UNIT,
    valid_encoding.UNIT,
    no_empty_lines.UNIT,
    non_empty_file.UNIT,
    at_least_two_lines.UNIT,
    semicolon_separators.UNIT,
    no_header_spaces.UNIT,
    lowercase_header.UNIT,
    term_description_header.UNIT,
    allowed_columns_header.UNIT,
    duplicate_header_cells.UNIT,
    no_empty_term_values.UNIT,
    duplicate_term_values.UNIT,
    orphan_locale_descriptions.UNIT,
    invalid_flags.UNIT,
]


def register_builtin_rules(registry: Optional[CheckRegistry] = None) -> CheckRegistry:
    """
    Enregistre les quinze règles intégrées.

    Args:
        registry: Registre cible (registre par défaut du processus si None)

    Returns:
        Le registre utilisé
    """
    if registry is None:
        registry = default_registry()
    for unit in ALL_UNITS:
        registry.register(unit)
    return registry


__all__ = ["ALL_UNITS", "register_builtin_rules"]

"""
Validation et auto-correction de glossaires CSV.

Glossary Guard vérifie des fichiers glossaire séparés par des points-virgules
(en-tête `term;description;...` puis une colonne par langue) avant leur
import, et sait corriger automatiquement la plupart des défauts.

Le traitement d'un fichier :
1. Les règles sont enregistrées dans un registre (nom, priorité, fail-fast)
2. Les règles critiques s'exécutent dans l'ordre, la première en échec arrête tout
3. Les règles normales s'exécutent ensuite (avertissements, corrections)
4. Chaque correction produit un nouvel artefact transmis à la règle suivante

Organisation du package :
- checks/ : moteur (modèle de données, politique de correction, registre)
- rules/ : les quinze règles de glossaire
- validator.py : exécution complète sur un fichier
- report.py : rendu texte du bilan (Jinja2)
- cli.py : ligne de commande

Exports publics :
    - validate, Summary : validation complète
    - register_builtin_rules : enregistrement des règles intégrées
    - CheckRegistry, RunOptions, FixMode, Status, RunContext
"""

from .checks import (
    Artifact,
    CheckOutcome,
    FixMode,
    RunContext,
    RunOptions,
    RunRecipe,
    Status,
    background,
    with_cancel,
    with_timeout,
)
from .checks.adapter import CheckAdapter, new_check_adapter
from .checks.registry import CheckRegistry, default_registry
from .checks.runner import run_with_fix
from .rules import register_builtin_rules
from .validator import Summary, validate

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "CheckAdapter",
    "CheckOutcome",
    "CheckRegistry",
    "FixMode",
    "RunContext",
    "RunOptions",
    "RunRecipe",
    "Status",
    "Summary",
    "background",
    "default_registry",
    "new_check_adapter",
    "register_builtin_rules",
    "run_with_fix",
    "validate",
    "with_cancel",
    "with_timeout",
]

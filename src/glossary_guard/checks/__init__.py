"""
Moteur de validation et d'auto-correction.

Ce package fournit le modèle de données (artefact, résultats, recette),
la politique de correction et l'annulation coopérative. Le moteur
lui-même vit dans les sous-modules :

- runner : run_with_fix, machine à états valider → corriger → re-valider
- guard : protections contre les exceptions des règles
- adapter : CheckAdapter, règle construite depuis une fonction
- registry : CheckRegistry, registre thread-safe et séquenceur
"""

from .base import (
    Artifact,
    CheckFunc,
    CheckOutcome,
    CheckResult,
    CheckUnit,
    FixFunc,
    FixMode,
    FixResult,
    RunOptions,
    RunRecipe,
    Status,
    ValidateFunc,
    ValidationResult,
)
from .context import RunContext, background, with_cancel, with_timeout
from .errors import (
    CancelledError,
    ConfigError,
    ContextError,
    DeadlineExceededError,
    FixError,
    GuardError,
    HardFailError,
    NoFixError,
    PipelineCancelledError,
    PipelineError,
    RegistryError,
)
from .policy import propagate_after_fix, should_attempt_fix

__all__ = [
    # Modèle de données
    "Artifact",
    "CheckFunc",
    "CheckOutcome",
    "CheckResult",
    "CheckUnit",
    "FixFunc",
    "FixMode",
    "FixResult",
    "RunOptions",
    "RunRecipe",
    "Status",
    "ValidateFunc",
    "ValidationResult",
    # Annulation
    "RunContext",
    "background",
    "with_cancel",
    "with_timeout",
    # Erreurs
    "CancelledError",
    "ConfigError",
    "ContextError",
    "DeadlineExceededError",
    "FixError",
    "GuardError",
    "HardFailError",
    "NoFixError",
    "PipelineCancelledError",
    "PipelineError",
    "RegistryError",
    # Politique
    "propagate_after_fix",
    "should_attempt_fix",
]

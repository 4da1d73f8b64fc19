"""
Exceptions du moteur de validation.

Ce module définit la taxonomie des erreurs levées ou transportées par le
moteur : refus de correction (sentinelle), échec de correction, annulation
coopérative, erreurs de registre et escalade au niveau du pipeline.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..validator import Summary


class GuardError(Exception):
    """Classe de base de toutes les erreurs de glossary-guard."""


class NoFixError(GuardError):
    """
    Sentinelle levée par une fonction de correction qui refuse d'agir.

    Un refus signifie « cet échec de validation n'est pas à moi de le
    réparer » : le moteur rapporte alors le statut d'échec configuré avec
    le message d'origine du validateur, jamais un statut ERROR.

    Attributes:
        note: Diagnostic optionnel expliquant le refus

    Example:
        >>> def fix(ctx, artifact):
        ...     if not artifact.data.strip():
        ...         raise NoFixError("no usable content to fix")
    """

    def __init__(self, note: str = ""):
        self.note = note
        super().__init__(note or "no fix implemented for this check")


class FixError(GuardError):
    """
    Exception inattendue levée pendant une correction.

    Le message contient l'exception d'origine et la trace de pile ;
    l'exception d'origine est conservée dans `__cause__`.
    """


class ContextError(GuardError):
    """Erreur de contexte : le travail doit s'arrêter."""


class CancelledError(ContextError):
    """Le contexte a été annulé explicitement."""

    def __init__(self, reason: str = "context canceled"):
        super().__init__(reason)


class DeadlineExceededError(ContextError):
    """L'échéance du contexte est dépassée."""

    def __init__(self, reason: str = "context deadline exceeded"):
        super().__init__(reason)


class RegistryError(GuardError, ValueError):
    """Enregistrement invalide (unité absente ou nom vide)."""


class ConfigError(GuardError, ValueError):
    """Valeur de configuration invalide (variable d'environnement, option CLI)."""


class PipelineError(GuardError):
    """
    Erreur remontée par le Validator après exécution partielle.

    Attributes:
        summary: Résumé complet au moment de l'arrêt (outcomes, compteurs,
                 état final du fichier)
    """

    def __init__(self, message: str, summary: "Summary"):
        self.summary = summary
        super().__init__(message)


class HardFailError(PipelineError):
    """Une ou plusieurs règles ont rendu ERROR alors que hard_fail_on_error est actif."""


class PipelineCancelledError(PipelineError):
    """Le contexte a été annulé entre deux règles."""

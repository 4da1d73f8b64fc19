"""
Garde-fous autour des fonctions de validation et de correction.

Une règle défaillante ne doit jamais interrompre le pipeline : toute
exception levée par validate/fix est convertie en résultat bien formé
(ValidationResult avec `err`, ou FixError) contenant la trace de pile.
"""

import traceback

from ..logger import get_logger
from .base import Artifact, FixFunc, FixResult, ValidateFunc, ValidationResult
from .context import RunContext
from .errors import ContextError, FixError, NoFixError

logger = get_logger(__name__)


def safe_validate(
    name: str, validate: ValidateFunc, ctx: RunContext, artifact: Artifact
) -> ValidationResult:
    """
    Appelle `validate` en interceptant toute exception.

    Args:
        name: Nom de la règle (pour le message)
        validate: Fonction de validation
        ctx: Contexte d'annulation
        artifact: Artefact à valider

    Returns:
        Le résultat de `validate`, ou un ValidationResult avec `err` renseigné
        et un message "panic in <name> validate: ..." incluant la trace
    """
    try:
        result = validate(ctx, artifact)
    except Exception as exc:
        logger.error(f"💥 Exception dans {name}.validate : {exc!r}")
        return ValidationResult(
            ok=False,
            msg=f"panic in {name} validate: {exc!r}\n{traceback.format_exc()}",
            err=exc,
        )

    if not isinstance(result, ValidationResult):
        return ValidationResult(
            ok=False,
            msg=f"{name} validate returned {type(result).__name__}, expected ValidationResult",
            err=TypeError("invalid validation result"),
        )
    return result


def safe_fix(
    name: str, fix: FixFunc | None, ctx: RunContext, artifact: Artifact
) -> FixResult:
    """
    Appelle `fix` en interceptant toute exception inattendue.

    NoFixError (refus), FixError et les erreurs de contexte remontent telles
    quelles ; toute autre exception est enveloppée dans une FixError.

    Args:
        name: Nom de la règle (pour le message)
        fix: Fonction de correction (None = pas de correction)
        ctx: Contexte d'annulation
        artifact: Artefact à corriger

    Returns:
        FixResult proposé par la correction

    Raises:
        NoFixError: Si la correction est absente ou refuse d'agir
        ContextError: Si la correction a détecté une annulation
        FixError: Pour toute autre exception
    """
    if fix is None:
        raise NoFixError()

    try:
        result = fix(ctx, artifact)
    except (NoFixError, FixError, ContextError):
        raise
    except Exception as exc:
        logger.error(f"💥 Exception dans {name}.fix : {exc!r}")
        raise FixError(
            f"panic in {name} fix: {exc!r}\n{traceback.format_exc()}"
        ) from exc

    if not isinstance(result, FixResult):
        raise FixError(
            f"{name} fix returned {type(result).__name__}, expected FixResult"
        )
    return result

"""
Moteur d'exécution des recettes : valider → corriger → propager → re-valider.

Ce module orchestre l'exécution d'une RunRecipe contre un artefact.
Il est protégé contre les exceptions des règles (voir guard.py), sensible
à l'annulation coopérative, et ne jette jamais le résultat d'une
correction réussie, même si la re-validation n'a pas pu avoir lieu.

Flux d'exécution:
1. Préconditions (nom, validate, contexte actif)
2. Validation → PASS immédiat si OK
3. Politique : pas de fix ou interdit → statut d'échec configuré
4. Contexte re-vérifié avant la correction
5. Correction (refus = statut d'échec + message d'origine ; exception = ERROR)
6. Propagation des données/chemin
7. Contexte re-vérifié après la correction
8. Re-validation optionnelle
9. Sinon WARN « correction appliquée »
"""

from ..logger import get_logger
from .base import (
    Artifact,
    CheckOutcome,
    CheckResult,
    FixResult,
    RunOptions,
    RunRecipe,
    Status,
)
from .context import RunContext
from .errors import GuardError, NoFixError
from .guard import safe_fix, safe_validate
from .policy import propagate_after_fix, should_attempt_fix

logger = get_logger(__name__)

_RUNNER_NAME = "checks.run_with_fix"


# =============================================================================
# Constructeurs d'outcomes
# =============================================================================


def outcome_keep(
    status: Status, name: str, msg: str, artifact: Artifact, note: str = ""
) -> CheckOutcome:
    """Outcome qui propage l'artefact d'entrée tel quel (changed=False)."""
    return CheckOutcome(
        result=CheckResult(name=name, status=status, message=msg),
        final=FixResult(data=artifact.data, path=artifact.path, changed=False, note=note),
    )


def outcome_with_final(
    status: Status, name: str, msg: str, final: FixResult
) -> CheckOutcome:
    """Outcome qui propage un état final explicite (après correction)."""
    return CheckOutcome(
        result=CheckResult(name=name, status=status, message=msg),
        final=final,
    )


def outcome_pass(name: str, msg: str, artifact: Artifact) -> CheckOutcome:
    return outcome_keep(Status.PASS, name, msg, artifact)


def outcome_error(name: str, msg: str, artifact: Artifact) -> CheckOutcome:
    return outcome_keep(Status.ERROR, name, msg, artifact)


# =============================================================================
# Moteur
# =============================================================================


def run_with_fix(
    ctx: RunContext, artifact: Artifact, opts: RunOptions, recipe: RunRecipe
) -> CheckOutcome:
    """
    Exécute une recette complète contre un artefact.

    Args:
        ctx: Contexte d'annulation
        artifact: Artefact courant
        opts: Réglages de l'exécution (fix_mode, rerun_after_fix)
        recipe: Recette déclarative de la règle

    Returns:
        CheckOutcome avec statut final et état à propager (toujours renseigné)

    Example:
        >>> recipe = RunRecipe(
        ...     name="demo",
        ...     validate=lambda ctx, a: ValidationResult(ok=a.data == b"fixed", msg="not fixed yet"),
        ...     fix=lambda ctx, a: FixResult(data=b"fixed", changed=True),
        ...     status_after_fixed=Status.PASS,
        ... )
        >>> opts = RunOptions(fix_mode=FixMode.IF_NOT_PASSING, rerun_after_fix=True)
        >>> out = run_with_fix(background(), Artifact(data=b"broken"), opts, recipe)
        >>> out.status, out.final.data
        (<Status.PASS: 'PASS'>, b'fixed')
    """
    fail_as = recipe.fail_as or Status.FAIL
    name = recipe.name

    # 1) préconditions
    if not name:
        return outcome_error(_RUNNER_NAME, "recipe has empty name", artifact)
    if recipe.validate is None:
        return outcome_error(name, "recipe.validate is None", artifact)
    err = ctx.err()
    if err is not None:
        return outcome_error(name, str(err), artifact)

    # 2) validation
    res = safe_validate(name, recipe.validate, ctx, artifact)
    if res.err is not None:
        msg = res.msg or f"validation error: {res.err}"
        return outcome_error(name, msg, artifact)
    if res.ok:
        return outcome_pass(name, recipe.pass_msg or res.msg or "ok", artifact)

    # 3) politique : tenter une correction ?
    if recipe.fix is None or not should_attempt_fix(opts.fix_mode, Status.FAIL):
        return outcome_keep(fail_as, name, res.msg or "validation failed", artifact)

    # 4) annulation avant la correction
    err = ctx.err()
    if err is not None:
        logger.debug(f"⏹️ {name}: correction ignorée (contexte annulé)")
        return outcome_keep(
            fail_as, name, f"cancelled before auto-fix: {err}", artifact
        )

    # 5) correction
    logger.debug(f"🔧 Correction {name} en cours ({artifact.path or '<sans chemin>'})...")
    try:
        fixed = safe_fix(name, recipe.fix, ctx, artifact)
    except NoFixError as decline:
        logger.debug(f"↩️ {name}: correction refusée ({decline.note or 'no fix'})")
        return outcome_keep(
            fail_as,
            name,
            res.msg or "validation failed (no auto-fix)",
            artifact,
            note=decline.note,
        )
    except GuardError as exc:
        logger.warning(f"⚠️ Correction {name} échouée : {str(exc).splitlines()[0]}")
        return outcome_error(name, f"failed to auto-fix: {exc}", artifact)

    # 6) propagation
    out_data, out_path, changed = propagate_after_fix(artifact, fixed)
    final = FixResult(data=out_data, path=out_path, changed=changed, note=fixed.note)

    # 7) annulation après la correction : on garde le résultat appliqué
    err = ctx.err()
    if err is not None:
        msg = f"{recipe.applied_msg or 'auto-fix applied'} (cancelled before revalidate)"
        status = Status.ERROR if fail_as is Status.ERROR else Status.WARN
        return outcome_with_final(status, name, msg, final)

    # 8) re-validation
    if opts.rerun_after_fix:
        logger.debug(f"🔄 Correction {name} terminée, re-validation...")
        after = safe_validate(
            name,
            recipe.validate,
            ctx,
            Artifact(data=out_data, path=out_path, langs=artifact.langs),
        )
        if after.err is not None:
            msg = after.msg or f"revalidation error: {after.err}"
            return outcome_with_final(Status.ERROR, name, msg, final)
        if after.ok:
            status = recipe.status_after_fixed or Status.WARN
            return outcome_with_final(status, name, recipe.fixed_msg or "fixed", final)
        prefix = recipe.still_bad_msg or "auto-fix attempted but still invalid"
        msg = f"{prefix} : {after.msg}" if after.msg else prefix
        return outcome_with_final(fail_as, name, msg, final)

    # 9) pas de re-validation : correction non confirmée → WARN
    applied = recipe.applied_msg or "auto-fix applied"
    if not changed and not fixed.note:
        applied = "auto-fix attempted (no changes)"
    return outcome_with_final(Status.WARN, name, applied, final)

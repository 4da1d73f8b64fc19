"""
Règle : le fichier doit avoir l'extension `.csv`.

Correction : renommage en `<base>.csv` (les données ne changent pas).
"""

import os

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix

CHECK_NAME = "ensure-valid-extension"


def validate_csv_ext(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    path = artifact.path.strip()
    if not path:
        return ValidationResult(ok=False, msg="empty path: cannot validate extension")

    ext = os.path.splitext(path)[1]
    if ext.lower() == ".csv":
        return ValidationResult(ok=True, msg='extension is ".csv"')

    return ValidationResult(
        ok=False, msg=f'invalid file extension: "{ext}" (expected ".csv")'
    )


def fix_csv_ext(ctx, artifact: Artifact) -> FixResult:
    """Renomme le chemin avec l'extension `.csv` en minuscules."""
    ctx.raise_if_cancelled()

    path = artifact.path.strip()
    if not path:
        return FixResult(data=artifact.data, note="empty path: nothing to fix")

    base, _ = os.path.splitext(path)
    new_path = base + ".csv"
    if new_path == path:
        return FixResult(data=artifact.data, note="already has .csv extension")

    return FixResult(data=artifact.data, path=new_path, changed=True, note="renamed to .csv")


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_csv_ext,
    fix=fix_csv_ext,
    pass_msg="file extension OK: .csv",
    fixed_msg="extension fixed to .csv",
    applied_msg="auto-fix applied (renamed to .csv)",
    status_after_fixed=Status.PASS,
)


def run_ensure_csv(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(CHECK_NAME, run_ensure_csv, fail_fast=True, priority=1)

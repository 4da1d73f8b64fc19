"""Règle : au moins deux lignes non vides (en-tête + une entrée). Pas de correction."""

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import decode, split_lines

CHECK_NAME = "ensure-at-least-two-lines"


def validate_at_least_two_lines(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    text = decode(artifact.data).strip()
    if not text:
        return ValidationResult(
            ok=False, msg="empty file: expected header and at least one data row"
        )

    lines = 0
    for line in split_lines(text):
        if not line.strip():
            continue
        lines += 1
        if lines >= 2:
            return ValidationResult(ok=True, msg="has ≥2 lines")

    return ValidationResult(
        ok=False,
        msg="expected at least two non-empty lines (header + one data row)",
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_at_least_two_lines,
    pass_msg="file has at least two lines (header + data)",
    fail_as=Status.FAIL,
)


def run_ensure_at_least_two_lines(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_ensure_at_least_two_lines, fail_fast=True, priority=5
)

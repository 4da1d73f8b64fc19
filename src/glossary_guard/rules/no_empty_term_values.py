"""
Règle : chaque entrée du glossaire a un terme non vide. Pas de correction.

Les lignes entièrement vides sont ignorées. Les numéros de ligne cités
sont ceux du fichier (lignes physiques).
"""

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import MAX_LISTED, any_non_empty, format_list, locate_column

CHECK_NAME = "no-empty-term-values"


def validate_no_empty_term_values(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if not artifact.data.strip():
        return ValidationResult(ok=True, msg="no content to validate for empty term values")

    located = locate_column(artifact.data, "term")
    if located is None:
        return ValidationResult(
            ok=True,
            msg="no header line found (nothing to validate for empty term values)",
        )
    records, term_idx = located
    if term_idx is None:
        return ValidationResult(
            ok=True, msg="no 'term' column found (skipping empty term validation)"
        )

    empty_rows = []
    for line, row in records:
        if not any_non_empty(row):
            continue
        value = row[term_idx] if term_idx < len(row) else ""
        if not value.strip():
            empty_rows.append(line)

    if not empty_rows:
        return ValidationResult(ok=True, msg="all rows have non-empty term")

    listed = format_list(empty_rows)
    if len(empty_rows) > MAX_LISTED:
        listed += ", ..."
    return ValidationResult(
        ok=False, msg=f"empty term in rows: {listed} (total {len(empty_rows)})"
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_no_empty_term_values,
    pass_msg="all rows have non-empty term",
    fail_as=Status.FAIL,
)


def run_no_empty_term_values(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_no_empty_term_values, fail_fast=True, priority=12
)

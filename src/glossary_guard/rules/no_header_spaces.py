"""
Règle : les noms de colonnes de l'en-tête n'ont pas d'espaces en bordure.

Correction : les cellules de l'en-tête sont rognées, le reste du fichier
est conservé octet pour octet.
"""

import csv

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import CsvDocument, read_header

CHECK_NAME = "no-spaces-in-header"


def validate_no_spaces_in_header(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if not artifact.data.strip():
        return ValidationResult(ok=False, msg="cannot check header: empty content")

    try:
        header = read_header(artifact.data)
    except csv.Error as exc:
        return ValidationResult(
            ok=False, msg="cannot parse header with semicolon delimiter", err=exc
        )
    if header is None:
        return ValidationResult(ok=False, msg="cannot check header: no usable content")

    bad = [str(i) for i, col in enumerate(header, start=1) if col != col.strip()]
    if bad:
        return ValidationResult(
            ok=False,
            msg="header has leading/trailing spaces in column names at positions: "
            + ", ".join(bad),
        )
    return ValidationResult(
        ok=True, msg="header columns are trimmed (no leading/trailing spaces)"
    )


def fix_no_spaces_in_header(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    doc = CsvDocument.parse(artifact.data)
    header = doc.header()
    trimmed = [col.strip() for col in header]
    if trimmed == header:
        return FixResult(data=artifact.data, note="header already trimmed")

    return FixResult(
        data=doc.render_header(trimmed),
        changed=True,
        note="trimmed leading/trailing spaces in header cells",
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_no_spaces_in_header,
    fix=fix_no_spaces_in_header,
    fail_as=Status.WARN,
    pass_msg="header columns are trimmed (no leading/trailing spaces)",
    fixed_msg="header auto-fixed: trimmed leading/trailing spaces in column names",
    applied_msg="auto-fix applied to header",
    still_bad_msg="auto-fix attempted but header still invalid",
    status_after_fixed=Status.PASS,
)


def run_no_spaces_in_header(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(CHECK_NAME, run_no_spaces_in_header, fail_fast=True, priority=7)

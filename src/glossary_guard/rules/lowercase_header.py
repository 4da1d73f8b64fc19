"""
Règle : les colonnes de service connues sont écrites en minuscules.

Les autres colonnes (langues, colonnes inconnues) ne sont pas concernées.
"""

import csv

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import KNOWN_HEADER_SET, CsvDocument, read_header

CHECK_NAME = "ensure-lowercase-header"


def validate_lowercase_header(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if not artifact.data.strip():
        return ValidationResult(ok=False, msg="cannot check header: no usable content")

    try:
        header = read_header(artifact.data)
    except csv.Error as exc:
        return ValidationResult(
            ok=False, msg="cannot parse header with semicolon delimiter", err=exc
        )
    if header is None:
        return ValidationResult(ok=False, msg="cannot check header: no usable content")

    bad = []
    for i, col in enumerate(header, start=1):
        trimmed = col.strip()
        lowered = trimmed.lower()
        if lowered in KNOWN_HEADER_SET and trimmed != lowered:
            bad.append(str(i))

    if bad:
        return ValidationResult(
            ok=False,
            msg="some service columns in header are not lowercase at positions: "
            + ", ".join(bad),
        )
    return ValidationResult(ok=True, msg="header service columns are already lowercase")


def fix_lowercase_header(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    doc = CsvDocument.parse(artifact.data)
    header = doc.header()

    normalized = []
    for col in header:
        lowered = col.strip().lower()
        normalized.append(lowered if lowered in KNOWN_HEADER_SET else col)

    if normalized == header:
        return FixResult(data=artifact.data, note="header service columns already lowercase")

    return FixResult(
        data=doc.render_header(normalized),
        changed=True,
        note="normalized service columns in header to lowercase",
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_lowercase_header,
    fix=fix_lowercase_header,
    fail_as=Status.WARN,
    pass_msg="header service columns are already lowercase",
    fixed_msg="normalized header service columns to lowercase",
    applied_msg="auto-fix applied: normalized header service columns to lowercase",
    still_bad_msg="header normalized but some service columns are still not lowercase",
    status_after_fixed=Status.PASS,
)


def run_ensure_lowercase_header(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_ensure_lowercase_header, fail_fast=True, priority=8
)

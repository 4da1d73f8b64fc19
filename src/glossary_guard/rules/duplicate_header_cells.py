"""Règle : pas de colonne en double dans l'en-tête (comparaison insensible à la casse)."""

import csv

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.errors import NoFixError
from ..checks.runner import run_with_fix
from .csv_helpers import CsvDocument, read_header

CHECK_NAME = "warn-duplicate-header-cells"


def find_duplicate_columns(header) -> dict[str, tuple[str, int]]:
    """
    Colonnes présentes plusieurs fois, dans l'ordre de première apparition.

    Returns:
        Dictionnaire clé normalisée -> (libellé d'origine, nombre d'occurrences)
    """
    counts: dict[str, list] = {}
    for raw in header:
        key = raw.strip().lower()
        if key in counts:
            counts[key][1] += 1
        else:
            counts[key] = [raw.strip() or "<empty>", 1]
    return {key: (label, n) for key, (label, n) in counts.items() if n > 1}


def validate_no_duplicate_header_cells(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if not artifact.data.strip():
        return ValidationResult(ok=True, msg="no content to check for duplicate headers")

    try:
        header = read_header(artifact.data)
    except csv.Error as exc:
        return ValidationResult(
            ok=False, msg="cannot parse header with semicolon delimiter", err=exc
        )
    if header is None:
        return ValidationResult(
            ok=True, msg="no header line found (nothing to check for duplicates)"
        )

    dups = find_duplicate_columns(header)
    if dups:
        listed = ", ".join(f"{label}({n})" for label, n in dups.values())
        return ValidationResult(ok=False, msg=f"duplicate header columns: {listed}")
    return ValidationResult(ok=True, msg="no duplicate header columns")


def fix_remove_duplicate_header_cells(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    doc = CsvDocument.parse(artifact.data)
    rows = doc.records()
    header = rows[0]

    dups = find_duplicate_columns(header)
    if not dups:
        raise NoFixError("no duplicate header columns to remove")

    seen: set[str] = set()
    keep: list[int] = []
    for i, raw in enumerate(header):
        key = raw.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        keep.append(i)

    # Les cellules au-delà de la largeur de l'en-tête sont conservées
    width = len(header)
    out = []
    for row in rows:
        ctx.raise_if_cancelled()
        out.append([row[i] for i in keep if i < len(row)] + row[width:])

    labels = ", ".join(label for label, _ in dups.values())
    return FixResult(
        data=doc.render_records(out),
        changed=True,
        note=f"removed duplicate header columns: {labels}",
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_no_duplicate_header_cells,
    fix=fix_remove_duplicate_header_cells,
    fail_as=Status.WARN,
    pass_msg="no duplicate header columns",
    fixed_msg="removed duplicate header columns",
    applied_msg="auto-fix applied: removed duplicate header columns",
    still_bad_msg="header still contains duplicate columns after fix",
    status_after_fixed=Status.PASS,
)


def run_warn_duplicate_header_cells(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_warn_duplicate_header_cells, fail_fast=False, priority=11
)

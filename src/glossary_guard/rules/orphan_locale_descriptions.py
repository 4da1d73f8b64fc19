"""
Règle : chaque colonne `<loc>_description` a sa colonne `<loc>`.

Correction : la colonne de langue manquante est insérée juste avant sa
description, vide pour toutes les entrées.
"""

import csv

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.errors import NoFixError
from ..checks.runner import run_with_fix
from .csv_helpers import KNOWN_HEADER_SET, CsvDocument, read_header

CHECK_NAME = "warn-orphan-locale-descriptions"

SUFFIX = "_description"


def find_orphan_locales(header) -> list[str]:
    """Locales ayant une colonne `_description` sans colonne de base, dans l'ordre de l'en-tête."""
    cells = [col.strip().lower() for col in header]
    present = set(cells)
    orphans: list[str] = []
    for col in cells:
        if not col.endswith(SUFFIX) or col in KNOWN_HEADER_SET:
            continue
        loc = col[: -len(SUFFIX)]
        if loc and loc not in present and loc not in orphans:
            orphans.append(loc)
    return orphans


def validate_no_orphan_locale_descriptions(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if not artifact.data.strip():
        return ValidationResult(ok=True, msg="no content to check for orphan descriptions")

    try:
        header = read_header(artifact.data)
    except csv.Error as exc:
        return ValidationResult(
            ok=False, msg="cannot parse header with semicolon delimiter", err=exc
        )
    if header is None:
        return ValidationResult(
            ok=True, msg="no header line found (nothing to check for orphan descriptions)"
        )

    orphans = find_orphan_locales(header)
    if orphans:
        return ValidationResult(
            ok=False,
            msg="orphan *_description columns without matching base locale: "
            f"{', '.join(orphans)} (total {len(orphans)})",
        )
    return ValidationResult(ok=True, msg="no orphan *_description columns")


def fix_add_missing_locale_columns(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    doc = CsvDocument.parse(artifact.data)
    rows = doc.records()
    header = rows[0]
    orphans = set(find_orphan_locales(header))
    if not orphans:
        raise NoFixError("no orphan *_description columns to fix")

    # Positions avant lesquelles insérer une colonne, avec son nom
    inserts: dict[int, str] = {}
    added: list[str] = []
    for i, raw in enumerate(header):
        col = raw.strip().lower()
        loc = col[: -len(SUFFIX)] if col.endswith(SUFFIX) else ""
        if loc in orphans and loc not in added:
            inserts[i] = loc
            added.append(loc)

    out = []
    for n, row in enumerate(rows):
        ctx.raise_if_cancelled()
        new_row: list[str] = []
        for i, cell in enumerate(row):
            if i in inserts:
                new_row.append(inserts[i] if n == 0 else "")
            new_row.append(cell.strip() if n == 0 else cell)
        out.append(new_row)

    return FixResult(
        data=doc.render_records(out),
        changed=True,
        note="added missing locale columns before *_description: " + ", ".join(added),
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_no_orphan_locale_descriptions,
    fix=fix_add_missing_locale_columns,
    fail_as=Status.WARN,
    pass_msg="no orphan *_description columns",
    fixed_msg="added missing locale columns before *_description",
    applied_msg="auto-fix applied: added missing locale columns before *_description",
    still_bad_msg="orphan *_description columns remain after fix",
    status_after_fixed=Status.PASS,
)


def run_warn_orphan_locale_descriptions(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_warn_orphan_locale_descriptions, fail_fast=False, priority=14
)

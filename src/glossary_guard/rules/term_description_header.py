"""
Règle : l'en-tête commence par `term;description`.

Correction : les colonnes `term` et `description` sont déplacées (ou
insérées vides) en tête de chaque enregistrement, les autres colonnes
gardent leur ordre relatif.
"""

import csv

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import CsvDocument, read_header

CHECK_NAME = "ensure-term-description-header"


def _normalized(header) -> list[str]:
    return [col.strip().lower() for col in header]


def _index_of(cells: list[str], name: str) -> int | None:
    try:
        return cells.index(name)
    except ValueError:
        return None


def validate_term_description_header(ctx, artifact: Artifact) -> ValidationResult:
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

    cells = _normalized(header)
    if len(cells) < 2:
        return ValidationResult(
            ok=False,
            msg="header has fewer than two columns; expected at least term;description",
        )
    if cells[0] == "term" and cells[1] == "description":
        return ValidationResult(ok=True, msg="header starts with term;description")

    has_term = "term" in cells
    has_desc = "description" in cells
    if has_term and has_desc:
        msg = "header contains term and description but not in required order or not at the start"
    elif has_term:
        msg = "header contains term but missing description column"
    elif has_desc:
        msg = "header contains description but missing term column"
    else:
        msg = "header missing both term and description columns"
    return ValidationResult(ok=False, msg=msg)


def fix_term_description_header(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    doc = CsvDocument.parse(artifact.data)
    rows = doc.records()
    cells = _normalized(rows[0])
    if len(cells) >= 2 and cells[0] == "term" and cells[1] == "description":
        return FixResult(data=artifact.data, note="header already starts with term;description")

    term_idx = _index_of(cells, "term")
    desc_idx = _index_of(cells, "description")
    moved = {term_idx, desc_idx}

    def pick(row: list[str], idx: int | None) -> str:
        if idx is None or idx >= len(row):
            return ""
        return row[idx]

    out = [["term", "description"] + [c for i, c in enumerate(rows[0]) if i not in moved]]
    for row in rows[1:]:
        ctx.raise_if_cancelled()
        rest = [c for i, c in enumerate(row) if i not in moved]
        out.append([pick(row, term_idx), pick(row, desc_idx)] + rest)

    if term_idx is not None and desc_idx is not None:
        note = "reordered columns to start with term;description"
    else:
        note = "inserted missing term/description columns at start"
    return FixResult(data=doc.render_records(out), changed=True, note=note)


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_term_description_header,
    fix=fix_term_description_header,
    pass_msg="header starts with term;description",
    fixed_msg="normalized header to start with term;description",
    applied_msg="auto-fix applied: normalized header to start with term;description",
    still_bad_msg="header still does not start with term;description after fix",
    status_after_fixed=Status.PASS,
)


def run_ensure_term_description_header(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_ensure_term_description_header, fail_fast=True, priority=9
)

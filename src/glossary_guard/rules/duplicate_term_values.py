"""
Règle : un terme n'apparaît qu'une fois dans le glossaire.

La comparaison porte sur la valeur rognée, en respectant la casse ; les
termes vides sont laissés à `no-empty-term-values`.

Correction : seule la première occurrence de chaque terme est conservée.
"""

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.errors import NoFixError
from ..checks.runner import run_with_fix
from .csv_helpers import MAX_LISTED, CsvDocument, any_non_empty, locate_column

CHECK_NAME = "warn-duplicate-term-values"


def _term_of(row: list[str], term_idx: int) -> str:
    return row[term_idx].strip() if term_idx < len(row) else ""


def find_duplicate_terms(records, term_idx: int) -> dict[str, list[int]]:
    """
    Termes présents plusieurs fois, dans l'ordre de première apparition.

    Returns:
        Dictionnaire terme -> numéros de ligne de toutes ses occurrences
    """
    lines: dict[str, list[int]] = {}
    for line, row in records:
        if not any_non_empty(row):
            continue
        term = _term_of(row, term_idx)
        if term:
            lines.setdefault(term, []).append(line)
    return {term: rows for term, rows in lines.items() if len(rows) > 1}


def _describe(dups: dict[str, list[int]]) -> str:
    parts = [
        f'"{term}" (rows {", ".join(str(n) for n in rows)})'
        for term, rows in list(dups.items())[:MAX_LISTED]
    ]
    if len(dups) > MAX_LISTED:
        parts.append("...")
    return "; ".join(parts)


def validate_no_duplicate_term_values(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if not artifact.data.strip():
        return ValidationResult(ok=True, msg="no content to check for duplicate terms")

    located = locate_column(artifact.data, "term")
    if located is None:
        return ValidationResult(
            ok=True, msg="no header line found (nothing to check for duplicate terms)"
        )
    records, term_idx = located
    if term_idx is None:
        return ValidationResult(
            ok=True, msg="no 'term' column found (skipping duplicate term check)"
        )

    dups = find_duplicate_terms(records, term_idx)
    if not dups:
        return ValidationResult(ok=True, msg="no duplicate term values")
    return ValidationResult(
        ok=False,
        msg=f"duplicate term values found: {_describe(dups)} "
        f"(total {len(dups)} duplicate terms)",
    )


def fix_remove_duplicate_term_rows(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    located = locate_column(artifact.data, "term")
    if located is None:
        raise NoFixError("no header line found")
    records, term_idx = located
    if term_idx is None:
        raise NoFixError("no 'term' column found")

    dups = find_duplicate_terms(records, term_idx)
    if not dups:
        raise NoFixError("no duplicate term rows to remove")

    doc = CsvDocument.parse(artifact.data)
    rows = doc.records()
    out = [rows[0]]
    seen: set[str] = set()
    for row in rows[1:]:
        ctx.raise_if_cancelled()
        term = _term_of(row, term_idx) if any_non_empty(row) else ""
        if term and term in seen:
            continue
        if term:
            seen.add(term)
        out.append(row)

    return FixResult(
        data=doc.render_records(out),
        changed=True,
        note=f"removed duplicate term rows for: {_describe(dups)}",
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_no_duplicate_term_values,
    fix=fix_remove_duplicate_term_rows,
    fail_as=Status.WARN,
    pass_msg="no duplicate term values",
    fixed_msg="removed duplicate term rows",
    applied_msg="auto-fix applied: removed duplicate term rows",
    still_bad_msg="duplicate term values are still present after fix",
    status_after_fixed=Status.PASS,
)


def run_warn_duplicate_term_values(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_warn_duplicate_term_values, fail_fast=False, priority=13
)

"""
Règle : les colonnes d'indicateurs ne contiennent que `yes` ou `no`.

Colonnes surveillées : casesensitive, translatable, forbidden. Une valeur
vide est invalide.

Correction : les synonymes courants (y/true/1, n/false/0, casse et espaces
indifférents) sont ramenés à `yes`/`no` ; les autres valeurs sont laissées
telles quelles et la re-validation les signale.
"""

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.errors import NoFixError
from ..checks.runner import run_with_fix
from .csv_helpers import MAX_LISTED, CsvDocument, any_non_empty, read_table

CHECK_NAME = "no-invalid-flags"

FLAG_COLUMNS = ("casesensitive", "translatable", "forbidden")
VALID_FLAGS = frozenset({"yes", "no"})

FLAG_SYNONYMS = {
    "yes": "yes",
    "y": "yes",
    "true": "yes",
    "1": "yes",
    "no": "no",
    "n": "no",
    "false": "no",
    "0": "no",
}


def flag_indexes(header) -> dict[str, int]:
    """Index des colonnes d'indicateurs présentes dans l'en-tête."""
    cells = [col.strip().lower() for col in header]
    return {name: cells.index(name) for name in FLAG_COLUMNS if name in cells}


def normalize_flag(value: str) -> str:
    """Forme canonique d'un indicateur, ou la valeur inchangée si elle n'est pas reconnue."""
    return FLAG_SYNONYMS.get(value.strip().lower(), value)


def find_invalid_flags(data: bytes) -> list[tuple[str, str, int]]:
    """
    Valeurs invalides dans l'ordre du fichier.

    Returns:
        Liste de (colonne, valeur, numéro de ligne)
    """
    table = read_table(data)
    if table is None:
        return []
    header, records = table
    indexes = flag_indexes(header)

    invalid = []
    for line, row in records:
        if not any_non_empty(row):
            continue
        for name, idx in indexes.items():
            value = row[idx] if idx < len(row) else ""
            if value.strip() not in VALID_FLAGS:
                invalid.append((name, value, line))
    return invalid


def validate_no_invalid_flags(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    invalid = find_invalid_flags(artifact.data)
    if not invalid:
        return ValidationResult(ok=True, msg="all flag columns contain only yes/no")

    parts = [f'{name}="{value}" (row {line})' for name, value, line in invalid[:MAX_LISTED]]
    if len(invalid) > MAX_LISTED:
        parts.append("...")
    return ValidationResult(
        ok=False,
        msg=f"invalid values in flag columns: {'; '.join(parts)} "
        f"(total {len(invalid)} invalid values)",
    )


def fix_normalize_flags(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    doc = CsvDocument.parse(artifact.data)
    rows = doc.records()
    indexes = flag_indexes(rows[0])
    if not indexes:
        raise NoFixError("no flag columns to normalize")

    changed = 0
    out = [rows[0]]
    for row in rows[1:]:
        ctx.raise_if_cancelled()
        new_row = list(row)
        for idx in indexes.values():
            if idx >= len(new_row):
                continue
            fixed = normalize_flag(new_row[idx])
            if fixed != new_row[idx]:
                new_row[idx] = fixed
                changed += 1
        out.append(new_row)

    if not changed:
        raise NoFixError("no flag values to normalize")

    return FixResult(
        data=doc.render_records(out),
        changed=True,
        note=f"normalized {changed} flag value(s) to yes/no",
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_no_invalid_flags,
    fix=fix_normalize_flags,
    pass_msg="all flag columns contain only yes/no",
    fixed_msg="normalized flag columns to yes/no",
    applied_msg="auto-fix applied: normalized flag columns to yes/no",
    still_bad_msg="invalid flag values remain after fix",
    status_after_fixed=Status.PASS,
)


def run_no_invalid_flags(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(CHECK_NAME, run_no_invalid_flags, fail_fast=True, priority=15)

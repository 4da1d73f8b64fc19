"""
Règle : l'en-tête ne contient que des colonnes autorisées.

Sont autorisées les colonnes de service connues ainsi que les colonnes de
langue `<lang>` et `<lang>_description`. Si l'appelant déclare des langues,
seules celles-ci sont admises et chacune doit avoir ses deux colonnes.

Correction : suppression des colonnes inconnues (ou de langues non
déclarées) et ajout en fin d'en-tête des colonnes de langues manquantes.
"""

import csv

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import KNOWN_HEADER_SET, CsvDocument, read_header

CHECK_NAME = "ensure-allowed-columns-header"

DESCRIPTION_SUFFIX = "_description"


def looks_like_lang_code(value: str) -> bool:
    """
    Forme d'un code de langue : 2-3 lettres ASCII, puis des segments alphanumériques.

    Example:
        >>> looks_like_lang_code("pt-BR"), looks_like_lang_code("zh_hant"), looks_like_lang_code("x")
        (True, True, False)
    """
    parts = value.replace("-", "_").split("_")
    first = parts[0]
    if not 2 <= len(first) <= 3 or not (first.isascii() and first.isalpha()):
        return False
    return all(part and part.isascii() and part.isalnum() for part in parts[1:])


def parse_lang_column(name: str) -> tuple[str, bool] | None:
    """
    Analyse un nom de colonne de langue.

    Returns:
        Tuple (code de langue, est une colonne de description), ou None
    """
    is_desc = name.endswith(DESCRIPTION_SUFFIX)
    base = name[: -len(DESCRIPTION_SUFFIX)] if is_desc else name
    if not looks_like_lang_code(base):
        return None
    return base, is_desc


def _declared_languages(artifact: Artifact) -> list[str]:
    out: list[str] = []
    for lang in artifact.langs:
        code = lang.strip().lower()
        if code and code not in out:
            out.append(code)
    return out


def _classify(header, declared: list[str]):
    """Répartit les colonnes : inconnues, langues non déclarées, langues vues."""
    declared_set = set(declared)
    unknown: list[str] = []
    undeclared: list[str] = []
    seen_langs: list[str] = []

    for raw in header:
        col = raw.strip().lower()
        if col in KNOWN_HEADER_SET:
            continue
        parsed = parse_lang_column(col)
        if parsed is None:
            unknown.append(raw.strip())
            continue
        lang, _ = parsed
        if lang not in seen_langs:
            seen_langs.append(lang)
        if declared_set and lang not in declared_set and lang not in undeclared:
            undeclared.append(lang)
    return unknown, undeclared, seen_langs


def _missing_columns(header, declared: list[str]) -> list[str]:
    present = {col.strip().lower() for col in header}
    missing: list[str] = []
    for lang in declared:
        for col in (lang, lang + DESCRIPTION_SUFFIX):
            if col not in present:
                missing.append(col)
    return missing


def validate_allowed_columns_header(ctx, artifact: Artifact) -> ValidationResult:
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

    declared = _declared_languages(artifact)
    unknown, undeclared, seen_langs = _classify(header, declared)

    if unknown:
        return ValidationResult(
            ok=False, msg="header has unknown columns: " + ", ".join(unknown)
        )

    if declared:
        missing = [lang for lang in declared if _missing_columns(header, [lang])]
        problems = []
        if undeclared:
            problems.append(
                "header has columns for undeclared languages: " + ", ".join(undeclared)
            )
        if missing:
            problems.append(
                "header is missing columns for declared languages: " + ", ".join(missing)
            )
        if problems:
            return ValidationResult(ok=False, msg=" ; ".join(problems))
        return ValidationResult(ok=True, msg="header columns are allowed")

    if seen_langs:
        return ValidationResult(
            ok=True,
            msg="header columns look like languages: "
            + ", ".join(seen_langs)
            + " (no declared language list, skipped strict validation)",
        )
    return ValidationResult(ok=True, msg="header columns are allowed")


def fix_allowed_columns_header(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    doc = CsvDocument.parse(artifact.data)
    rows = doc.records()
    header = rows[0]
    declared = _declared_languages(artifact)
    declared_set = set(declared)

    keep: list[int] = []
    for i, raw in enumerate(header):
        col = raw.strip().lower()
        if col in KNOWN_HEADER_SET:
            keep.append(i)
            continue
        parsed = parse_lang_column(col)
        if parsed is None:
            continue
        if declared_set and parsed[0] not in declared_set:
            continue
        keep.append(i)

    missing = _missing_columns([header[i] for i in keep], declared)
    if len(keep) == len(header) and not missing:
        return FixResult(data=artifact.data, note="header already normalized")

    def remap(row: list[str]) -> list[str]:
        out = [row[i] if i < len(row) else "" for i in keep]
        return out + [""] * len(missing)

    out = [[header[i] for i in keep] + missing]
    for row in rows[1:]:
        ctx.raise_if_cancelled()
        out.append(remap(row))

    return FixResult(
        data=doc.render_records(out),
        changed=True,
        note="removed unknown columns and ensured declared languages are present",
    )


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_allowed_columns_header,
    fix=fix_allowed_columns_header,
    fail_as=Status.WARN,
    pass_msg="header columns are allowed",
    fixed_msg="header columns normalized (unknown columns removed, missing language columns added)",
    applied_msg="auto-fix applied to header columns",
    still_bad_msg="header columns still have issues after auto-fix",
    status_after_fixed=Status.PASS,
)


def run_ensure_allowed_columns_header(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_ensure_allowed_columns_header, fail_fast=False, priority=10
)

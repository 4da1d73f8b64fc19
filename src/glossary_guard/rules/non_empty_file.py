"""
Règle : le fichier ne doit pas être vide.

Correction : un fichier vide (ou blanc) reçoit un en-tête minimal, complété
par une paire `<lang>;<lang>_description` par langue déclarée.
L'en-tête inséré n'a ni BOM ni saut de ligne final.
"""

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import DELIMITER, KNOWN_HEADERS, is_blank_unicode, strip_bom

CHECK_NAME = "ensure-not-empty"


def build_header(langs) -> str:
    """
    En-tête par défaut pour les langues données (minuscules, sans doublon).

    Example:
        >>> build_header(["EN", "fr", "en"])
        'term;description;casesensitive;translatable;forbidden;tags;en;en_description;fr;fr_description'
    """
    fields = list(KNOWN_HEADERS)
    seen: set[str] = set()
    for lang in langs:
        code = lang.strip().lower()
        if not code or code in seen:
            continue
        seen.add(code)
        fields.extend([code, f"{code}_description"])
    return DELIMITER.join(fields)


def validate_not_empty(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if not artifact.data.strip():
        return ValidationResult(ok=False, msg="empty file: no data")
    return ValidationResult(ok=True)


def fix_add_header_if_empty(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    _, body = strip_bom(artifact.data)
    if not is_blank_unicode(body):
        return FixResult(
            data=artifact.data, note="file already has data; no header inserted"
        )

    header = build_header(artifact.langs)
    return FixResult(data=header.encode("utf-8"), changed=True, note="inserted CSV header")


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_not_empty,
    fix=fix_add_header_if_empty,
    pass_msg="file is not empty",
    fixed_msg="inserted CSV header",
    applied_msg="auto-fix applied (inserted CSV header)",
    status_after_fixed=Status.PASS,
)


def run_ensure_not_empty(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(CHECK_NAME, run_ensure_not_empty, fail_fast=True, priority=4)

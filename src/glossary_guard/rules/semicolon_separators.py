"""
Règle : le séparateur de champs doit être le point-virgule.

Un contenu est « proprement séparé » par un délimiteur si son analyse
donne un tableau rectangulaire de largeur > 1.

Correction : conversion depuis la tabulation ou la virgule si l'une
d'elles donne un tableau rectangulaire ; refus sinon.
"""

import csv

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.errors import NoFixError
from ..checks.runner import run_with_fix
from .csv_helpers import (
    decode,
    detect_line_ending,
    encode,
    is_blank_unicode,
    read_records,
    strip_bom,
    write_records,
)

CHECK_NAME = "ensure-semicolon-separators"


def attempt_rect_parse(text: str, delimiter: str) -> list[list[str]] | None:
    """
    Analyse `text` avec `delimiter` et vérifie que le résultat est rectangulaire.

    La largeur de référence est celle du premier enregistrement utile.

    Returns:
        Les enregistrements si le tableau est rectangulaire de largeur > 1,
        None sinon
    """
    try:
        records = read_records(text, delimiter)
    except csv.Error:
        return None
    if not records:
        return None

    width = 0
    for row in records:
        if len(row) > 1 or row[0].strip():
            width = len(row)
            break
    if width <= 1:
        return None

    if any(len(row) != width for row in records):
        return None
    return records


def validate_semicolon_separated(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    _, body = strip_bom(artifact.data)
    if is_blank_unicode(body):
        return ValidationResult(ok=False, msg="cannot detect separators: no usable content")

    text = decode(body)
    if attempt_rect_parse(text, ";") is not None:
        return ValidationResult(ok=True)

    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    if attempt_rect_parse(text, ",") is not None:
        return ValidationResult(
            ok=False,
            msg="file appears to use commas as separators; expected semicolons (;)",
        )
    if attempt_rect_parse(text, "\t") is not None:
        return ValidationResult(
            ok=False,
            msg="file appears to use tabs as separators; expected semicolons (;)",
        )
    return ValidationResult(
        ok=False,
        msg="could not confirm consistent semicolon-separated format; "
        "cannot confidently detect an alternative delimiter",
    )


def fix_to_semicolons_if_consistent(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    bom, body = strip_bom(artifact.data)
    if is_blank_unicode(body):
        raise NoFixError("no usable content to convert")

    text = decode(body)
    if attempt_rect_parse(text, ";") is not None:
        return FixResult(data=artifact.data, note="already semicolon-separated")

    sep = detect_line_ending(text)
    keep_final = text.endswith("\n")

    for delimiter, label in (("\t", "tabs"), (",", "commas")):
        records = attempt_rect_parse(text, delimiter)
        if records is None:
            continue
        out = write_records(records, sep, keep_final, delimiter=";")
        return FixResult(
            data=bom + encode(out),
            changed=True,
            note=f"converted from {label} to semicolons",
        )

    raise NoFixError("cannot confidently detect delimiter; skipped auto-convert")


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_semicolon_separated,
    fix=fix_to_semicolons_if_consistent,
    pass_msg="file uses semicolons as separators",
    fixed_msg="converted separators to semicolons",
    applied_msg="auto-fix applied: converted separators to semicolons",
    still_bad_msg="auto-fix attempted but file is still not cleanly semicolon-separated",
    status_after_fixed=Status.PASS,
)


def run_ensure_semicolon_separators(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(
    CHECK_NAME, run_ensure_semicolon_separators, fail_fast=True, priority=6
)

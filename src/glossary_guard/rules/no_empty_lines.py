"""
Règle : pas de lignes vides (ou composées uniquement de blancs).

Non bloquante (WARN). La correction supprime les lignes blanches, y compris
celles qui ne contiennent que des caractères de largeur nulle, et rejoint
les lignes restantes avec la fin de ligne détectée, sans saut final.
"""

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.runner import run_with_fix
from .csv_helpers import (
    MAX_LISTED,
    decode,
    detect_line_ending,
    encode,
    format_list,
    is_blank_unicode,
    split_lines,
)

CHECK_NAME = "ensure-no-empty-lines"


def find_empty_lines(data: bytes) -> list[int]:
    """Numéros (1-based) des lignes vides ou blanches."""
    return [
        number
        for number, line in enumerate(split_lines(decode(data)), start=1)
        if not line.strip()
    ]


def format_empty_message(empty: list[int]) -> str:
    """
    Example:
        >>> format_empty_message([2, 5])
        'found 2 empty line(s) at lines 2, 5'
    """
    total = len(empty)
    head = "found 1 empty line" if total == 1 else f"found {total} empty line(s)"
    msg = f"{head} at lines {format_list(empty)}"
    if total > MAX_LISTED:
        msg += f" (+{total - MAX_LISTED} more)"
    return msg


def validate_no_empty_lines(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    empty = find_empty_lines(artifact.data)
    if not empty:
        return ValidationResult(ok=True)
    return ValidationResult(ok=False, msg=format_empty_message(empty))


def fix_remove_empty_lines(ctx, artifact: Artifact) -> FixResult:
    ctx.raise_if_cancelled()

    data = artifact.data
    if not data:
        return FixResult(data=data, note="empty file")

    text = decode(data)
    sep = detect_line_ending(text)

    kept: list[str] = []
    dropped = 0
    for line in split_lines(text):
        if is_blank_unicode(line):
            dropped += 1
            continue
        kept.append(line)

    if dropped == 0:
        return FixResult(data=data, note="no empty lines to remove")

    note = "removed 1 empty line" if dropped == 1 else f"removed {dropped} empty lines"
    return FixResult(data=encode(sep.join(kept)), changed=True, note=note)


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_no_empty_lines,
    fix=fix_remove_empty_lines,
    pass_msg="no empty lines detected",
    fixed_msg="empty lines removed",
    applied_msg="auto-fix applied (blank lines removed)",
    fail_as=Status.WARN,
    status_after_fixed=Status.PASS,
)


def run_no_empty_lines(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(CHECK_NAME, run_no_empty_lines, priority=3)

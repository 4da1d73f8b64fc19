"""
Règle : le fichier doit être encodé en UTF-8.

Correction, dans l'ordre :
1. BOM UTF-8 → retiré
2. BOM UTF-16/UTF-32 (LE/BE) → décodé puis ré-encodé en UTF-8
3. UTF-16 sans BOM, détecté par la répartition des octets nuls
4. UTF-8 déjà valide → inchangé
5. Sinon détection par chardet (repli cp1252) puis ré-encodage

La sortie n'a jamais de BOM.
"""

import chardet

from ..checks.adapter import new_check_adapter
from ..checks.base import Artifact, FixResult, RunRecipe, Status, ValidationResult
from ..checks.errors import FixError
from ..checks.runner import run_with_fix
from ..logger import get_logger
from .csv_helpers import UTF8_BOM

logger = get_logger(__name__)

CHECK_NAME = "ensure-utf8-encoding"

FALLBACK_ENCODING = "cp1252"

# Taille de l'échantillon pour l'heuristique UTF-16 sans BOM
UTF16_PROBE_SIZE = 4096


def validate_utf8(ctx, artifact: Artifact) -> ValidationResult:
    err = ctx.err()
    if err is not None:
        return ValidationResult(ok=False, msg="validation cancelled", err=err)

    data = artifact.data
    if not data:
        return ValidationResult(ok=False, msg="empty file: cannot determine encoding")

    try:
        data.decode("utf-8")
    except UnicodeDecodeError as exc:
        return ValidationResult(
            ok=False, msg=f"invalid UTF-8 at byte {exc.start} of {len(data)}"
        )
    return ValidationResult(ok=True)


# =============================================================================
# Détection
# =============================================================================


def is_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def sniff_bom(data: bytes) -> str | None:
    """
    Identifie un BOM en tête des données.

    Returns:
        "utf-8", "utf-16-le", "utf-16-be", "utf-32-le", "utf-32-be" ou None
    """
    if data.startswith(UTF8_BOM):
        return "utf-8"
    if data.startswith(b"\xff\xfe\x00\x00"):
        return "utf-32-le"
    if data.startswith(b"\x00\x00\xfe\xff"):
        return "utf-32-be"
    if data.startswith(b"\xff\xfe"):
        return "utf-16-le"
    if data.startswith(b"\xfe\xff"):
        return "utf-16-be"
    return None


def looks_like_utf16_without_bom(data: bytes) -> str | None:
    """
    Heuristique UTF-16 sans BOM sur les premiers octets.

    Si au moins 20% des octets sondés sont nuls et qu'ils se concentrent
    nettement sur les positions paires (BE) ou impaires (LE), le contenu
    est considéré comme de l'UTF-16.

    Returns:
        "utf-16-be", "utf-16-le" ou None
    """
    probe = data[:UTF16_PROBE_SIZE]
    if len(probe) < 4:
        return None

    even_zeros = sum(1 for i in range(0, len(probe), 2) if probe[i] == 0)
    odd_zeros = sum(1 for i in range(1, len(probe), 2) if probe[i] == 0)

    if (even_zeros + odd_zeros) * 5 < len(probe):
        return None
    if even_zeros > odd_zeros * 2:
        return "utf-16-be"
    if odd_zeros > even_zeros * 2:
        return "utf-16-le"
    return None


def _pad(data: bytes, width: int) -> bytes:
    remainder = len(data) % width
    if remainder:
        data += b"\x00" * (width - remainder)
    return data


def _decode_unicode(data: bytes, encoding: str) -> bytes:
    """Décode de l'UTF-16/32 (sans BOM) et ré-encode en UTF-8."""
    width = 4 if encoding.startswith("utf-32") else 2
    text = _pad(data, width).decode(encoding, errors="replace")
    if width == 4:
        text = text.replace("\ufeff", "")
    return text.encode("utf-8")


# =============================================================================
# Correction
# =============================================================================


def fix_utf8(ctx, artifact: Artifact) -> FixResult:
    """Ré-encode le contenu en UTF-8 sans BOM."""
    ctx.raise_if_cancelled()

    data = artifact.data
    if not data:
        return FixResult(data=data, note="empty file")

    # 1) chemins guidés par le BOM
    bom = sniff_bom(data)
    if bom == "utf-8":
        return FixResult(
            data=data[len(UTF8_BOM):], changed=True, note="removed UTF-8 BOM"
        )
    if bom is not None:
        ctx.raise_if_cancelled()
        skip = 4 if bom.startswith("utf-32") else 2
        label = bom.upper().replace("-LE", "LE").replace("-BE", "BE")
        return FixResult(
            data=_decode_unicode(data[skip:], bom),
            changed=True,
            note=f"re-encoded from {label} to UTF-8 (no BOM)",
        )

    # 2) UTF-16 sans BOM, avant de traiter le contenu comme de l'UTF-8
    utf16 = looks_like_utf16_without_bom(data)
    if utf16 is not None:
        ctx.raise_if_cancelled()
        label = "BE" if utf16.endswith("be") else "LE"
        return FixResult(
            data=_decode_unicode(data, utf16),
            changed=True,
            note=f"re-encoded from UTF-16{label} (no BOM) to UTF-8",
        )

    # 3) déjà valide
    if is_utf8(data):
        return FixResult(data=data, note="already valid UTF-8")

    # 4) détection d'un encodage 8 bits
    ctx.raise_if_cancelled()
    detected = chardet.detect(data)
    encoding = (detected.get("encoding") or FALLBACK_ENCODING).lower()
    logger.debug(
        f"🔍 chardet : {encoding} (confiance {detected.get('confidence') or 0.0:.2f})"
    )

    for candidate in dict.fromkeys([encoding, FALLBACK_ENCODING]):
        try:
            text = data.decode(candidate)
        except (UnicodeDecodeError, LookupError):
            continue
        decoded = text.encode("utf-8")
        if decoded.startswith(UTF8_BOM):
            decoded = decoded[len(UTF8_BOM):]
        return FixResult(
            data=decoded,
            changed=decoded != data,
            note=f"re-encoded from {candidate} to UTF-8 (no BOM)",
        )

    raise FixError(f"failed to produce valid UTF-8 (source={encoding})")


RECIPE = RunRecipe(
    name=CHECK_NAME,
    validate=validate_utf8,
    fix=fix_utf8,
    pass_msg="file encoding is valid UTF-8",
    fixed_msg="encoding fixed to valid UTF-8",
    applied_msg="auto-fix applied",
    status_after_fixed=Status.PASS,
)


def run_utf8_check(ctx, artifact, opts):
    return run_with_fix(ctx, artifact, opts, RECIPE)


UNIT = new_check_adapter(CHECK_NAME, run_utf8_check, fail_fast=True, priority=2)

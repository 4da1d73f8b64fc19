"""
Outils CSV partagés par les règles du glossaire.

Format attendu : séparateur `;`, guillemets tolérants, nombre de champs
variable. Les enregistrements vides sont ignorés, l'en-tête est le premier
enregistrement non vide.

Les corrections réécrivent le fichier en conservant :
- le BOM UTF-8 éventuel en tête
- la fin de ligne d'origine (`\\r\\n` si majoritaire, sinon `\\n`)
- la présence ou l'absence d'un saut de ligne final

Le texte est décodé en UTF-8 avec `surrogateescape` : des octets invalides
survivent à un aller-retour décodage/encodage sans être altérés.
"""

import csv
import io
import sys
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence

from ..checks.errors import NoFixError
from ..logger import get_logger

logger = get_logger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"
DELIMITER = ";"

# Colonnes de service reconnues par l'import de glossaire
KNOWN_HEADERS = (
    "term",
    "description",
    "casesensitive",
    "translatable",
    "forbidden",
    "tags",
)
KNOWN_HEADER_SET = frozenset(KNOWN_HEADERS)

# Caractères invisibles traités comme du blanc
ZERO_WIDTH_CHARS = frozenset("\u200b\u200c\u200d\u2060\ufeff")

# Nombre maximum d'éléments cités dans un message
MAX_LISTED = 10


def _raise_field_size_limit() -> int:
    """
    Lève la limite de taille de champ du module csv (131072 par défaut).

    Une cellule longue ne doit ni faire échouer la détection du séparateur
    ni interrompre la lecture des lignes suivantes.
    """
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            limit //= 2


FIELD_SIZE_LIMIT = _raise_field_size_limit()


# =============================================================================
# Octets et lignes
# =============================================================================


def strip_bom(data: bytes) -> tuple[bytes, bytes]:
    """
    Sépare le BOM UTF-8 éventuel du contenu.

    Returns:
        Tuple (bom, reste) où bom vaut b"" en l'absence de BOM
    """
    if data.startswith(UTF8_BOM):
        return UTF8_BOM, data[len(UTF8_BOM):]
    return b"", data


def decode(data: bytes) -> str:
    return data.decode("utf-8", errors="surrogateescape")


def encode(text: str) -> bytes:
    return text.encode("utf-8", errors="surrogateescape")


def detect_line_ending(data: bytes | str) -> str:
    """
    Fin de ligne dominante : "\\r\\n" si elle est majoritaire, sinon "\\n".

    Example:
        >>> detect_line_ending(b"a\\r\\nb\\r\\nc\\n")
        '\\r\\n'
    """
    if isinstance(data, bytes):
        crlf = data.count(b"\r\n")
        lf = data.count(b"\n") - crlf
    else:
        crlf = data.count("\r\n")
        lf = data.count("\n") - crlf
    return "\r\n" if crlf > lf else "\n"


def is_blank_unicode(data: bytes | str) -> bool:
    """True si le contenu ne contient que des blancs (espaces Unicode, caractères de largeur nulle)."""
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    return all(ch.isspace() or ch in ZERO_WIDTH_CHARS for ch in text)


def split_lines(text: str) -> list[str]:
    """
    Découpe en lignes physiques sans les séparateurs (`\\r` final retiré).

    Un saut de ligne final ne produit pas de ligne vide supplémentaire.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def any_non_empty(row: Sequence[str]) -> bool:
    return any(cell.strip() for cell in row)


def format_list(items: Sequence, limit: int = MAX_LISTED) -> str:
    """Joint au plus `limit` éléments par des virgules."""
    return ", ".join(str(item) for item in items[:limit])


# =============================================================================
# Lecture / écriture CSV
# =============================================================================


def iter_records(text: str, delimiter: str = DELIMITER) -> Iterator[tuple[int, list[str]]]:
    """
    Itère sur les enregistrements non vides avec leur numéro de ligne.

    Args:
        text: Contenu décodé
        delimiter: Séparateur de champs

    Yields:
        Tuple (numéro de la dernière ligne physique de l'enregistrement, champs)

    Raises:
        csv.Error: Si le contenu ne peut pas être analysé
    """
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    for row in reader:
        if not row:
            continue
        yield reader.line_num, row


def read_records(text: str, delimiter: str = DELIMITER) -> list[list[str]]:
    """Tous les enregistrements non vides (lève csv.Error si illisible)."""
    return [row for _, row in iter_records(text, delimiter)]


def read_records_lenient(
    text: str, delimiter: str = DELIMITER
) -> list[tuple[int, list[str]]]:
    """
    Comme iter_records, mais s'arrête silencieusement à la première erreur.

    Les erreurs d'analyse sont rapportées par les règles structurelles ;
    les règles de contenu se contentent de ce qui est lisible.
    """
    records: list[tuple[int, list[str]]] = []
    try:
        for item in iter_records(text, delimiter):
            records.append(item)
    except csv.Error as exc:
        logger.debug(f"⚠️ Lecture CSV interrompue après {len(records)} enregistrement(s) : {exc}")
    return records


def find_header(rows: Iterable[Sequence[str]]) -> Optional[int]:
    """Index du premier enregistrement non vide, None s'il n'y en a pas."""
    for index, row in enumerate(rows):
        if any_non_empty(row):
            return index
    return None


def write_records(
    rows: Iterable[Optional[Sequence[str]]],
    line_sep: str,
    keep_final: bool,
    delimiter: str = DELIMITER,
) -> str:
    """
    Sérialise des enregistrements.

    Args:
        rows: Enregistrements (None = ligne vide conservée)
        line_sep: Fin de ligne à utiliser
        keep_final: Conserver une fin de ligne après le dernier enregistrement
        delimiter: Séparateur de champs

    Returns:
        Texte CSV
    """
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator=line_sep)
    for row in rows:
        if row is None:
            buf.write(line_sep)
            continue
        writer.writerow(row)

    out = buf.getvalue()
    if not keep_final and out.endswith(line_sep):
        out = out[: -len(line_sep)]
    return out


def read_header(data: bytes) -> Optional[list[str]]:
    """
    En-tête du fichier (premier enregistrement non vide), BOM retiré.

    Returns:
        Cellules de l'en-tête, ou None si le fichier n'a aucun enregistrement utile

    Raises:
        csv.Error: Si le contenu ne peut pas être analysé
    """
    _, body = strip_bom(data)
    for _, row in iter_records(decode(body)):
        if any_non_empty(row):
            return row
    return None


# =============================================================================
# Document pour les corrections
# =============================================================================


@dataclass
class CsvDocument:
    """
    Fichier glossaire découpé pour une réécriture fidèle.

    Attributes:
        bom: BOM UTF-8 d'origine (b"" si absent)
        before: Lignes blanches précédant l'en-tête, conservées telles quelles
        header_line: Ligne physique de l'en-tête (sans fin de ligne)
        rest: Tout ce qui suit la ligne d'en-tête
        line_sep: Fin de ligne dominante
        keep_final: Le fichier se termine par un saut de ligne
    """

    bom: bytes
    before: str
    header_line: str
    rest: str
    line_sep: str
    keep_final: bool

    @classmethod
    def parse(cls, data: bytes) -> "CsvDocument":
        """
        Localise l'en-tête d'un fichier à corriger.

        Raises:
            NoFixError: Si le fichier n'a pas de contenu utile ou pas d'en-tête
        """
        bom, body = strip_bom(data)
        if not body.strip():
            raise NoFixError("no usable content to fix")

        text = decode(body)
        line_sep = detect_line_ending(text)
        keep_final = text.endswith("\n")

        pos = 0
        while pos <= len(text):
            newline = text.find("\n", pos)
            end = len(text) if newline < 0 else newline
            line = text[pos:end]
            if line.endswith("\r"):
                line = line[:-1]
            if line.strip():
                rest = "" if newline < 0 else text[newline + 1:]
                return cls(
                    bom=bom,
                    before=text[:pos],
                    header_line=line,
                    rest=rest,
                    line_sep=line_sep,
                    keep_final=keep_final,
                )
            if newline < 0:
                break
            pos = newline + 1

        raise NoFixError("no header line found")

    @property
    def body(self) -> str:
        """Texte à partir de l'en-tête (en-tête inclus)."""
        return self.header_line + "\n" + self.rest

    def records(self) -> list[list[str]]:
        """
        Enregistrements à partir de l'en-tête (le premier est l'en-tête).

        Raises:
            NoFixError: Si le contenu ne peut pas être analysé
        """
        try:
            rows = read_records(self.body)
        except csv.Error as exc:
            raise NoFixError("cannot parse CSV with semicolon delimiter") from exc
        if not rows or find_header(rows) is None:
            raise NoFixError("no header record found")
        return rows

    def header(self) -> list[str]:
        """Cellules de l'en-tête."""
        try:
            rows = read_records(self.header_line)
        except csv.Error as exc:
            raise NoFixError("cannot parse header with semicolon delimiter") from exc
        if not rows:
            raise NoFixError("no header record found")
        return rows[0]

    def render_records(self, rows: Iterable[Optional[Sequence[str]]]) -> bytes:
        """Réécrit tout le fichier à partir de l'en-tête."""
        tail = write_records(rows, self.line_sep, self.keep_final)
        return self.bom + encode(self.before + tail)

    def render_header(self, cells: Sequence[str]) -> bytes:
        """Remplace la seule ligne d'en-tête, le reste est conservé octet pour octet."""
        keep = self.keep_final or bool(self.rest)
        header = write_records([cells], self.line_sep, keep)
        return self.bom + encode(self.before + header + self.rest)


def read_table(data: bytes):
    """
    Lit le fichier de façon tolérante et sépare l'en-tête du reste.

    Returns:
        Tuple (cellules de l'en-tête, enregistrements numérotés qui le
        suivent), ou None si le fichier n'a pas d'en-tête
    """
    _, body = strip_bom(data)
    records = read_records_lenient(decode(body))
    for pos, (_, row) in enumerate(records):
        if any_non_empty(row):
            return row, records[pos + 1:]
    return None


def locate_column(data: bytes, name: str):
    """
    Repère une colonne de service dans l'en-tête.

    Returns:
        Tuple (enregistrements qui suivent l'en-tête, index de la colonne
        ou None), ou None si le fichier n'a pas d'en-tête
    """
    table = read_table(data)
    if table is None:
        return None
    header, records = table
    cells = [col.strip().lower() for col in header]
    index = cells.index(name) if name in cells else None
    return records, index

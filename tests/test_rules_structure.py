"""
Tests des règles structurelles : extension, encodage, lignes vides,
fichier vide, nombre de lignes, séparateurs.
"""

from glossary_guard.checks.base import Artifact, FixMode, RunOptions, Status
from glossary_guard.checks.context import background
from glossary_guard.rules import (
    at_least_two_lines,
    no_empty_lines,
    non_empty_file,
    semicolon_separators,
    valid_encoding,
    valid_extension,
)

REPAIR = RunOptions(fix_mode=FixMode.IF_NOT_PASSING, rerun_after_fix=True)


def run_rule(module, data, path="glossary.csv", langs=(), opts=REPAIR):
    return module.UNIT.run(background(), Artifact(data=data, path=path, langs=langs), opts)


class TestValidExtension:
    """Tests de la règle ensure-valid-extension."""

    def test_uppercase_extension_passes(self):
        """Vérifie qu'une extension .CSV en majuscules est acceptée."""
        out = run_rule(valid_extension, b"x", path="Glossary.CSV", opts=RunOptions())
        assert out.status == Status.PASS
        assert out.message == "file extension OK: .csv"

    def test_wrong_extension_message(self):
        """Vérifie le message pour une mauvaise extension."""
        out = run_rule(valid_extension, b"x", path="glossary.TXT", opts=RunOptions())
        assert out.status == Status.FAIL
        assert out.message == 'invalid file extension: ".TXT" (expected ".csv")'

    def test_fix_renames(self):
        """Vérifie que la correction renomme en .csv sans toucher aux données."""
        out = run_rule(valid_extension, b"x", path="dir/glossary.txt")
        assert out.status == Status.PASS
        assert out.final.path == "dir/glossary.csv"
        assert out.final.data == b"x"


class TestValidEncoding:
    """Tests de la règle ensure-utf8-encoding."""

    def test_utf8_with_bom_passes(self):
        """Vérifie qu'un UTF-8 avec BOM est accepté."""
        out = run_rule(valid_encoding, b"\xef\xbb\xbfterm;description\n", opts=RunOptions())
        assert out.status == Status.PASS

    def test_invalid_utf8_message(self):
        """Vérifie la position de l'octet invalide dans le message."""
        out = run_rule(valid_encoding, b"caf\xe9", opts=RunOptions())
        assert out.status == Status.FAIL
        assert out.message == "invalid UTF-8 at byte 3 of 4"

    def test_empty_file_fails(self):
        """Vérifie qu'un fichier vide ne permet pas de déterminer l'encodage."""
        out = run_rule(valid_encoding, b"", opts=RunOptions())
        assert out.message == "empty file: cannot determine encoding"

    def test_fix_legacy_encoding(self):
        """Vérifie la conversion d'un fichier cp1252 en UTF-8."""
        data = "term;description\ncafé;boisson chaude à base de café\n".encode("cp1252")
        out = run_rule(valid_encoding, data)

        assert out.status == Status.PASS
        decoded = out.final.data.decode("utf-8")
        assert decoded.startswith("term;description\ncaf")

    def test_fix_utf16_with_bom(self):
        """Vérifie la conversion d'un UTF-16 avec BOM."""
        data = b"\xff\xfe" + "term;description\n".encode("utf-16-le")
        out = run_rule(valid_encoding, data)

        assert out.status == Status.PASS
        assert out.final.data == b"term;description\n"

    def test_fix_strips_utf8_bom(self, ctx):
        """Vérifie que la correction retire le BOM UTF-8."""
        res = valid_encoding.fix_utf8(ctx, Artifact(data=b"\xef\xbb\xbfa;b"))
        assert res.data == b"a;b"
        assert res.changed is True

    def test_fix_utf16_without_bom(self, ctx):
        """Vérifie la détection d'un UTF-16LE sans BOM."""
        data = "term;description\ncat;animal\n".encode("utf-16-le")
        res = valid_encoding.fix_utf8(ctx, Artifact(data=data))

        assert res.data == b"term;description\ncat;animal\n"
        assert "UTF-16LE" in res.note


class TestNoEmptyLines:
    """Tests de la règle ensure-no-empty-lines."""

    def test_reports_line_numbers(self):
        """Vérifie les numéros des lignes vides signalées."""
        out = run_rule(no_empty_lines, b"a;b\n\nc;d\n  \ne;f", opts=RunOptions())
        assert out.status == Status.WARN
        assert out.message == "found 2 empty line(s) at lines 2, 4"

    def test_fix_keeps_crlf_without_final_newline(self):
        """Vérifie que la correction garde les fins de ligne CRLF."""
        out = run_rule(no_empty_lines, b"a;b\r\n\r\nc;d\r\n")
        assert out.status == Status.PASS
        assert out.final.data == b"a;b\r\nc;d"

    def test_many_lines_are_truncated(self):
        """Vérifie la troncature de la liste des lignes vides."""
        msg = no_empty_lines.format_empty_message(list(range(1, 13)))
        assert msg == "found 12 empty line(s) at lines 1, 2, 3, 4, 5, 6, 7, 8, 9, 10 (+2 more)"


class TestNonEmptyFile:
    """Tests de la règle ensure-not-empty."""

    def test_empty_file_fails(self):
        """Vérifie qu'un fichier blanc est en échec."""
        out = run_rule(non_empty_file, b"  \n", opts=RunOptions())
        assert out.status == Status.FAIL
        assert out.message == "empty file: no data"

    def test_fix_inserts_header_with_languages(self):
        """Vérifie l'en-tête inséré pour les langues déclarées."""
        out = run_rule(non_empty_file, b"", langs=("EN", "fr"))
        assert out.status == Status.PASS
        assert out.final.data == (
            b"term;description;casesensitive;translatable;forbidden;tags;"
            b"en;en_description;fr;fr_description"
        )


class TestAtLeastTwoLines:
    """Tests de la règle ensure-at-least-two-lines."""

    def test_header_only_fails(self):
        """Vérifie qu'un en-tête seul est en échec."""
        out = run_rule(at_least_two_lines, b"term;description\n\n")
        assert out.status == Status.FAIL
        assert out.message == "expected at least two non-empty lines (header + one data row)"

    def test_two_lines_pass(self):
        """Vérifie qu'un en-tête et une ligne suffisent."""
        out = run_rule(at_least_two_lines, b"term;description\ncat;animal")
        assert out.status == Status.PASS


class TestSemicolonSeparators:
    """Tests de la règle ensure-semicolon-separators."""

    def test_commas_detected(self):
        """Vérifie la détection des virgules comme séparateur."""
        out = run_rule(semicolon_separators, b"term,description\ncat,animal\n", opts=RunOptions())
        assert out.status == Status.FAIL
        assert out.message == "file appears to use commas as separators; expected semicolons (;)"

    def test_fix_converts_commas(self):
        """Vérifie la conversion des virgules en points-virgules."""
        out = run_rule(semicolon_separators, b"term,description\ncat,animal\n")
        assert out.status == Status.PASS
        assert out.final.data == b"term;description\ncat;animal\n"

    def test_fix_converts_tabs_and_keeps_bom(self):
        """Vérifie la conversion des tabulations en conservant BOM et CRLF."""
        out = run_rule(semicolon_separators, b"\xef\xbb\xbfterm\tdescription\r\ncat\tanimal")
        assert out.status == Status.PASS
        assert out.final.data == b"\xef\xbb\xbfterm;description\r\ncat;animal"

    def test_ragged_file_is_declined(self):
        """Vérifie le refus de corriger un tableau irrégulier."""
        out = run_rule(semicolon_separators, b"a;b\nc;d;e\n")
        assert out.status == Status.FAIL
        assert out.message.startswith("could not confirm consistent semicolon-separated format")
        assert out.final.data == b"a;b\nc;d;e\n"

    def test_single_column_is_not_rectangular(self):
        """Vérifie qu'une seule colonne ne compte pas comme tableau séparé."""
        assert semicolon_separators.attempt_rect_parse("term\ncat\n", ";") is None

    def test_long_cell_is_accepted(self):
        """Vérifie qu'une cellule de plus de 128 Kio ne bloque pas la détection du séparateur."""
        data = b"term;description\nhello;" + b"x" * 200_000 + b"\ncat;animal\n"
        out = run_rule(semicolon_separators, data, opts=RunOptions())

        assert out.status == Status.PASS
        assert out.message == "file uses semicolons as separators"

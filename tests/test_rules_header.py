"""
Tests des règles d'en-tête : espaces, casse, term;description,
colonnes autorisées, doublons.
"""

import pytest

from glossary_guard.checks.base import Artifact, FixMode, RunOptions, Status
from glossary_guard.checks.context import background
from glossary_guard.checks.errors import NoFixError
from glossary_guard.rules import (
    allowed_columns_header,
    duplicate_header_cells,
    lowercase_header,
    no_header_spaces,
    term_description_header,
)
from glossary_guard.rules.allowed_columns_header import looks_like_lang_code, parse_lang_column

REPAIR = RunOptions(fix_mode=FixMode.IF_NOT_PASSING, rerun_after_fix=True)


def run_rule(module, data, langs=(), opts=REPAIR):
    return module.UNIT.run(background(), Artifact(data=data, path="glossary.csv", langs=langs), opts)


class TestNoHeaderSpaces:
    """Tests de la règle no-spaces-in-header."""

    def test_reports_positions(self):
        """Vérifie les positions des colonnes entourées d'espaces."""
        out = run_rule(no_header_spaces, b"term ; description;tags\ncat;a;b\n", opts=RunOptions())
        assert out.status == Status.WARN
        assert out.message == (
            "header has leading/trailing spaces in column names at positions: 1, 2"
        )

    def test_fix_keeps_rest_and_bom(self):
        """Vérifie que seul l'en-tête est rogné, BOM et données conservés."""
        data = b"\xef\xbb\xbf term;description\r\n cat ; x \r\n"
        out = run_rule(no_header_spaces, data)

        assert out.status == Status.PASS
        assert out.message == "header auto-fixed: trimmed leading/trailing spaces in column names"
        assert out.final.data == b"\xef\xbb\xbfterm;description\r\n cat ; x \r\n"

    def test_trimmed_header_is_noop(self, ctx):
        """Vérifie qu'un en-tête déjà propre n'est pas modifié."""
        res = no_header_spaces.fix_no_spaces_in_header(ctx, Artifact(data=b"term;description\n"))
        assert res.changed is False
        assert res.note == "header already trimmed"


class TestLowercaseHeader:
    """Tests de la règle ensure-lowercase-header."""

    def test_only_service_columns_are_checked(self):
        """Vérifie que seules les colonnes de service sont contrôlées."""
        out = run_rule(lowercase_header, b"Term;DESCRIPTION;EN\ncat;animal;cat\n", opts=RunOptions())
        assert out.status == Status.WARN
        assert out.message == (
            "some service columns in header are not lowercase at positions: 1, 2"
        )

    def test_fix_lowercases_known_columns(self):
        """Vérifie la mise en minuscules des colonnes connues."""
        out = run_rule(lowercase_header, b"Term;DESCRIPTION;EN\ncat;animal;cat\n")
        assert out.status == Status.PASS
        assert out.final.data == b"term;description;EN\ncat;animal;cat\n"


class TestTermDescriptionHeader:
    """Tests de la règle ensure-term-description-header."""

    @pytest.mark.parametrize(
        "header, message",
        [
            (b"term", "header has fewer than two columns; expected at least term;description"),
            (b"description;term", "header contains term and description but not in required order or not at the start"),
            (b"term;tags", "header contains term but missing description column"),
            (b"tags;description", "header contains description but missing term column"),
            (b"tags;en", "header missing both term and description columns"),
        ],
    )
    def test_messages(self, ctx, header, message):
        """Vérifie le message pour chaque forme d'en-tête invalide."""
        res = term_description_header.validate_term_description_header(
            ctx, Artifact(data=header + b"\nx;y\n")
        )
        assert res.ok is False
        assert res.msg == message

    def test_fix_reorders_all_rows(self):
        """Vérifie le réordonnancement de toutes les lignes."""
        out = run_rule(term_description_header, b"description;term;tags\nan animal;cat;pets\n")
        assert out.status == Status.PASS
        assert out.final.data == b"term;description;tags\ncat;an animal;pets\n"
        assert out.final.note == "reordered columns to start with term;description"

    def test_fix_inserts_missing_column(self):
        """Vérifie l'insertion de la colonne manquante."""
        out = run_rule(term_description_header, b"term;tags\ncat;x\n")
        assert out.status == Status.PASS
        assert out.final.data == b"term;description;tags\ncat;;x\n"
        assert out.final.note == "inserted missing term/description columns at start"

    def test_failure_is_fail_without_fix(self):
        """Vérifie le statut FAIL sans correction."""
        out = run_rule(term_description_header, b"tags;en\nx;y\n", opts=RunOptions())
        assert out.status == Status.FAIL


class TestAllowedColumnsHeader:
    """Tests de la règle ensure-allowed-columns-header."""

    @pytest.mark.parametrize(
        "value, expected",
        [("en", True), ("pt-BR", True), ("zh_hant", True), ("x", False), ("english", False), ("en_", False)],
    )
    def test_looks_like_lang_code(self, value, expected):
        """Vérifie la reconnaissance des codes de langue."""
        assert looks_like_lang_code(value) is expected

    def test_parse_lang_column(self):
        """Vérifie l'analyse des colonnes de langue et de description."""
        assert parse_lang_column("fr_description") == ("fr", True)
        assert parse_lang_column("fr") == ("fr", False)
        assert parse_lang_column("comment") is None

    def test_unknown_columns(self):
        """Vérifie le signalement des colonnes inconnues."""
        out = run_rule(
            allowed_columns_header,
            b"term;description;comment;en;en_description\ncat;animal;x;cat;a cat\n",
            langs=("en",),
            opts=RunOptions(),
        )
        assert out.status == Status.WARN
        assert out.message == "header has unknown columns: comment"

    def test_undeclared_and_missing_languages(self):
        """Vérifie le message combiné langues non déclarées / manquantes."""
        out = run_rule(
            allowed_columns_header,
            b"term;description;en;en_description;de\ncat;animal;cat;a cat;Katze\n",
            langs=("en", "fr"),
            opts=RunOptions(),
        )
        assert out.message == (
            "header has columns for undeclared languages: de ; "
            "header is missing columns for declared languages: fr"
        )

    def test_fix_drops_and_appends(self):
        """Vérifie la suppression des langues non déclarées et l'ajout des manquantes."""
        out = run_rule(
            allowed_columns_header,
            b"term;description;en;en_description;de\ncat;animal;cat;a cat;Katze\n",
            langs=("en", "fr"),
        )
        assert out.status == Status.PASS
        assert out.final.data == (
            b"term;description;en;en_description;fr;fr_description\n"
            b"cat;animal;cat;a cat;;\n"
        )

    def test_without_declared_languages(self, ctx):
        """Vérifie le message sans liste de langues déclarées."""
        res = allowed_columns_header.validate_allowed_columns_header(
            ctx, Artifact(data=b"term;description;en;en_description\ncat;a;cat;b\n")
        )
        assert res.ok is True
        assert res.msg == (
            "header columns look like languages: en "
            "(no declared language list, skipped strict validation)"
        )


class TestDuplicateHeaderCells:
    """Tests de la règle warn-duplicate-header-cells."""

    def test_reports_counts(self):
        """Vérifie le décompte des colonnes en double."""
        out = run_rule(duplicate_header_cells, b"term;description;Term\ncat;animal;dup\n", opts=RunOptions())
        assert out.status == Status.WARN
        assert out.message == "duplicate header columns: term(2)"

    def test_fix_drops_later_columns(self):
        """Vérifie la suppression des colonnes répétées."""
        out = run_rule(duplicate_header_cells, b"term;description;Term\ncat;animal;dup\n")
        assert out.status == Status.PASS
        assert out.final.data == b"term;description\ncat;animal\n"
        assert out.final.note == "removed duplicate header columns: term"

    def test_fix_declines_without_duplicates(self, ctx):
        """Vérifie le refus de corriger sans doublon."""
        with pytest.raises(NoFixError):
            duplicate_header_cells.fix_remove_duplicate_header_cells(
                ctx, Artifact(data=b"term;description\ncat;animal\n")
            )

    def test_empty_content_is_ok(self, ctx):
        """Vérifie qu'un contenu vide n'est pas signalé."""
        res = duplicate_header_cells.validate_no_duplicate_header_cells(ctx, Artifact(data=b""))
        assert res.ok is True

"""
Tests du moteur run_with_fix (machine à états valider → corriger → re-valider).
"""

import pytest

from glossary_guard.checks.base import (
    Artifact,
    FixMode,
    FixResult,
    RunOptions,
    RunRecipe,
    Status,
    ValidationResult,
)
from glossary_guard.checks.errors import NoFixError
from glossary_guard.checks.runner import run_with_fix


def validate_fixed(ctx, artifact):
    """Valide seulement si le contenu vaut b"fixed"."""
    if artifact.data == b"fixed":
        return ValidationResult(ok=True)
    return ValidationResult(ok=False, msg="not fixed yet")


def fix_to_fixed(ctx, artifact):
    return FixResult(data=b"fixed", changed=True, note="set to fixed")


class CountingFix:
    """Correction qui compte ses appels."""

    def __init__(self, result=None):
        self.calls = 0
        self.result = result or FixResult(data=b"fixed", changed=True)

    def __call__(self, ctx, artifact):
        self.calls += 1
        return self.result


REPAIR = RunOptions(fix_mode=FixMode.IF_NOT_PASSING, rerun_after_fix=True)


class TestPreconditions:
    """Tests des préconditions de la recette."""

    def test_empty_name_is_error(self, ctx):
        """Vérifie qu'une recette sans nom produit ERROR au nom du moteur."""
        recipe = RunRecipe(name="", validate=validate_fixed)
        out = run_with_fix(ctx, Artifact(data=b"x"), RunOptions(), recipe)

        assert out.status == Status.ERROR
        assert out.name == "checks.run_with_fix"
        assert "empty name" in out.message

    def test_missing_validate_is_error(self, ctx):
        """Vérifie qu'une recette sans validate produit ERROR sans toucher l'artefact."""
        recipe = RunRecipe(name="demo", validate=None)
        out = run_with_fix(ctx, Artifact(data=b"x"), RunOptions(), recipe)

        assert out.status == Status.ERROR
        assert out.final.data == b"x"

    def test_cancelled_context_is_error(self, cancelled_ctx):
        """Vérifie qu'un contexte déjà annulé produit ERROR."""
        recipe = RunRecipe(name="demo", validate=validate_fixed)
        out = run_with_fix(cancelled_ctx, Artifact(data=b"x"), RunOptions(), recipe)

        assert out.status == Status.ERROR
        assert "context canceled" in out.message


class TestValidationOnly:
    """Tests sans correction."""

    def test_pass_uses_configured_message(self, ctx):
        """Vérifie que le message de succès configuré est utilisé."""
        recipe = RunRecipe(name="demo", validate=validate_fixed, pass_msg="all good")
        out = run_with_fix(ctx, Artifact(data=b"fixed"), RunOptions(), recipe)

        assert out.status == Status.PASS
        assert out.message == "all good"
        assert out.final.changed is False
        assert out.final.data == b"fixed"

    def test_failure_without_fix_uses_default_fail(self, ctx):
        """Vérifie qu'un échec sans correction donne FAIL par défaut."""
        recipe = RunRecipe(name="demo", validate=validate_fixed)
        out = run_with_fix(ctx, Artifact(data=b"x"), REPAIR, recipe)

        assert out.status == Status.FAIL
        assert out.message == "not fixed yet"

    def test_failure_uses_configured_status(self, ctx):
        """Vérifie que fail_as remplace le statut d'échec."""
        recipe = RunRecipe(name="demo", validate=validate_fixed, fail_as=Status.WARN)
        out = run_with_fix(ctx, Artifact(data=b"x"), RunOptions(), recipe)

        assert out.status == Status.WARN

    def test_policy_never_skips_fix(self, ctx):
        """Vérifie que le mode never n'appelle jamais la correction."""
        fix = CountingFix()
        recipe = RunRecipe(name="demo", validate=validate_fixed, fix=fix)
        out = run_with_fix(ctx, Artifact(data=b"x"), RunOptions(fix_mode=FixMode.NEVER), recipe)

        assert fix.calls == 0
        assert out.status == Status.FAIL
        assert out.final.data == b"x"

    def test_validate_exception_is_contained(self, ctx):
        """Vérifie qu'une exception dans validate devient ERROR."""
        def boom(ctx, artifact):
            raise RuntimeError("kaboom")

        recipe = RunRecipe(name="demo", validate=boom)
        out = run_with_fix(ctx, Artifact(data=b"x"), RunOptions(), recipe)

        assert out.status == Status.ERROR
        assert "kaboom" in out.message
        assert "panic in demo validate" in out.message


class TestFixFlow:
    """Tests du chemin de correction."""

    def test_end_to_end_fix_then_pass(self, ctx):
        """Vérifie le scénario complet : correction puis re-validation réussie."""
        recipe = RunRecipe(
            name="demo",
            validate=validate_fixed,
            fix=fix_to_fixed,
            fixed_msg="repaired",
            status_after_fixed=Status.PASS,
        )
        out = run_with_fix(ctx, Artifact(data=b"broken"), REPAIR, recipe)

        assert out.status == Status.PASS
        assert out.message == "repaired"
        assert out.final.changed is True
        assert out.final.data == b"fixed"

    def test_fixed_status_defaults_to_warn(self, ctx):
        """Vérifie que le statut après correction vaut WARN par défaut."""
        recipe = RunRecipe(name="demo", validate=validate_fixed, fix=fix_to_fixed)
        out = run_with_fix(ctx, Artifact(data=b"broken"), REPAIR, recipe)

        assert out.status == Status.WARN
        assert out.final.data == b"fixed"

    def test_still_bad_message_is_composed(self, ctx):
        """Vérifie le message composé quand la re-validation échoue encore."""
        recipe = RunRecipe(
            name="demo",
            validate=validate_fixed,
            fix=lambda ctx, a: FixResult(data=b"other", changed=True),
            still_bad_msg="still broken",
        )
        out = run_with_fix(ctx, Artifact(data=b"broken"), REPAIR, recipe)

        assert out.status == Status.FAIL
        assert out.message == "still broken : not fixed yet"
        assert out.final.data == b"other"

    def test_decline_keeps_original_message(self, ctx):
        """Vérifie qu'un refus de correction conserve le message de validation."""
        def decline(ctx, artifact):
            raise NoFixError("not mine")

        recipe = RunRecipe(name="demo", validate=validate_fixed, fix=decline, fail_as=Status.WARN)
        out = run_with_fix(ctx, Artifact(data=b"x"), REPAIR, recipe)

        assert out.status == Status.WARN
        assert out.message == "not fixed yet"
        assert out.final.note == "not mine"
        assert out.final.data == b"x"

    def test_fix_exception_is_error(self, ctx):
        """Vérifie qu'une exception dans la correction devient ERROR."""
        def broken_fix(ctx, artifact):
            raise KeyError("missing")

        recipe = RunRecipe(name="demo", validate=validate_fixed, fix=broken_fix)
        out = run_with_fix(ctx, Artifact(data=b"x"), REPAIR, recipe)

        assert out.status == Status.ERROR
        assert out.message.startswith("failed to auto-fix: panic in demo fix")
        assert out.final.data == b"x"

    def test_without_rerun_is_always_warn(self, ctx):
        """Vérifie que sans re-validation le statut est WARN même avec fail_as=ERROR."""
        recipe = RunRecipe(
            name="demo",
            validate=validate_fixed,
            fix=fix_to_fixed,
            fail_as=Status.ERROR,
            applied_msg="applied",
        )
        opts = RunOptions(fix_mode=FixMode.ALWAYS, rerun_after_fix=False)
        out = run_with_fix(ctx, Artifact(data=b"broken"), opts, recipe)

        assert out.status == Status.WARN
        assert out.message == "applied"
        assert out.final.data == b"fixed"

    def test_rename_propagates_path(self, ctx):
        """Vérifie qu'un renommage seul est propagé et marqué comme changement."""
        recipe = RunRecipe(
            name="demo",
            validate=lambda ctx, a: ValidationResult(ok=a.path.endswith(".csv"), msg="bad ext"),
            fix=lambda ctx, a: FixResult(path="glossary.csv"),
            status_after_fixed=Status.PASS,
        )
        out = run_with_fix(ctx, Artifact(data=b"x", path="glossary.txt"), REPAIR, recipe)

        assert out.status == Status.PASS
        assert out.final.path == "glossary.csv"
        assert out.final.changed is True

    @pytest.mark.parametrize("mode", list(FixMode))
    def test_no_op_on_valid_artifact(self, ctx, mode):
        """Vérifie qu'un artefact valide reste inchangé quel que soit le mode."""
        fix = CountingFix()
        recipe = RunRecipe(name="demo", validate=validate_fixed, fix=fix)
        out = run_with_fix(ctx, Artifact(data=b"fixed"), RunOptions(fix_mode=mode), recipe)

        assert out.status == Status.PASS
        assert out.final.changed is False
        assert out.final.data == b"fixed"


class TestCancellation:
    """Tests des points de contrôle d'annulation."""

    def test_cancel_before_fix_never_runs_fix(self, ctx):
        """Vérifie qu'une annulation avant correction n'appelle pas la correction."""
        fix = CountingFix()

        def validate_and_cancel(context, artifact):
            context.cancel()
            return ValidationResult(ok=False, msg="bad")

        recipe = RunRecipe(name="demo", validate=validate_and_cancel, fix=fix, fail_as=Status.WARN)
        out = run_with_fix(ctx, Artifact(data=b"x"), REPAIR, recipe)

        assert fix.calls == 0
        assert out.status == Status.WARN
        assert out.message == "cancelled before auto-fix: context canceled"

    def test_cancel_during_fix_keeps_fixed_data(self, ctx):
        """Vérifie qu'une annulation après correction garde les données corrigées."""
        def fix_and_cancel(context, artifact):
            context.cancel()
            return FixResult(data=b"fixed", changed=True)

        recipe = RunRecipe(
            name="demo", validate=validate_fixed, fix=fix_and_cancel, applied_msg="applied"
        )
        out = run_with_fix(ctx, Artifact(data=b"x"), REPAIR, recipe)

        assert out.status == Status.WARN
        assert out.message == "applied (cancelled before revalidate)"
        assert out.final.data == b"fixed"

    def test_cancel_during_fix_with_error_status(self, ctx):
        """Vérifie qu'une annulation après correction donne ERROR si fail_as=ERROR."""
        def fix_and_cancel(context, artifact):
            context.cancel()
            return FixResult(data=b"fixed", changed=True)

        recipe = RunRecipe(
            name="demo", validate=validate_fixed, fix=fix_and_cancel, fail_as=Status.ERROR
        )
        out = run_with_fix(ctx, Artifact(data=b"x"), REPAIR, recipe)

        assert out.status == Status.ERROR
        assert out.final.data == b"fixed"


class TestRevalidationAndNotes:
    """Tests de la re-validation et des messages de correction."""

    def test_revalidation_error_keeps_fixed_artifact(self, ctx):
        """Vérifie qu'une erreur à la re-validation donne ERROR avec l'artefact corrigé."""
        calls = []

        def validate_then_crash(context, artifact):
            calls.append(artifact.data)
            if len(calls) > 1:
                raise RuntimeError("revalidation crashed")
            return ValidationResult(ok=False, msg="bad")

        recipe = RunRecipe(
            name="demo",
            validate=validate_then_crash,
            fix=lambda ctx, a: FixResult(data=b"new", changed=True),
        )
        out = run_with_fix(ctx, Artifact(data=b"old"), REPAIR, recipe)

        assert out.status == Status.ERROR
        assert "revalidation crashed" in out.message
        assert out.final.data == b"new"
        assert out.final.changed is True
        assert calls == [b"old", b"new"]

    def test_unchanged_fix_without_note(self, ctx):
        """Vérifie le message quand la correction ne change rien et ne laisse pas de note."""
        recipe = RunRecipe(
            name="demo",
            validate=validate_fixed,
            fix=lambda ctx, a: FixResult(),
            applied_msg="applied",
        )
        opts = RunOptions(fix_mode=FixMode.ALWAYS, rerun_after_fix=False)
        out = run_with_fix(ctx, Artifact(data=b"x"), opts, recipe)

        assert out.status == Status.WARN
        assert out.message == "auto-fix attempted (no changes)"
        assert out.final.changed is False
        assert out.final.data == b"x"

    def test_unchanged_fix_with_note_keeps_applied_message(self, ctx):
        """Vérifie qu'une note de correction conserve le message configuré."""
        recipe = RunRecipe(
            name="demo",
            validate=validate_fixed,
            fix=lambda ctx, a: FixResult(note="nothing to do"),
            applied_msg="applied",
        )
        opts = RunOptions(fix_mode=FixMode.ALWAYS, rerun_after_fix=False)
        out = run_with_fix(ctx, Artifact(data=b"x"), opts, recipe)

        assert out.message == "applied"
        assert out.final.note == "nothing to do"

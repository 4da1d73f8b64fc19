"""
Configuration pytest pour les tests glossary-guard.

Ce fichier contient les fixtures communes à tous les tests.
"""

import pytest

from glossary_guard.checks.context import background, with_cancel
from glossary_guard.checks.registry import CheckRegistry
from glossary_guard.logger import LogSession


@pytest.fixture(autouse=True)
def isolated_log_session(tmp_path):
    """Redirige les logs de la session vers un répertoire temporaire."""
    previous = LogSession.base_dir
    LogSession.reset(base_dir=tmp_path / "logs")
    yield
    LogSession.reset(base_dir=previous)


@pytest.fixture
def registry():
    """Registre vide, propre à chaque test."""
    return CheckRegistry()


@pytest.fixture
def ctx():
    """Contexte actif."""
    return background()


@pytest.fixture
def cancelled_ctx():
    """Contexte déjà annulé."""
    context, cancel = with_cancel()
    cancel()
    return context


@pytest.fixture
def glossary_bytes():
    """Glossaire valide avec deux langues."""
    return (
        b"term;description;casesensitive;translatable;forbidden;tags;en;en_description;fr;fr_description\n"
        b"cat;animal;no;yes;no;;cat;a cat;chat;un chat\n"
        b"dog;animal;no;yes;no;;dog;a dog;chien;un chien\n"
    )

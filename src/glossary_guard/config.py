"""
Configuration de glossary-guard.

Les valeurs par défaut sont des attributs de classe (singletons verrouillables).
Les réglages d'exécution peuvent être surchargés par un fichier .env
(python-dotenv) puis par les variables d'environnement, et enfin par la CLI.
"""

import logging
import os
from typing import Optional

from dotenv import dotenv_values, find_dotenv

from .checks.base import FixMode, RunOptions
from .checks.errors import ConfigError

ENV_PREFIX = "GLOSSARY_GUARD_"
ENV_FIX_MODE = "GLOSSARY_GUARD_FIX_MODE"
ENV_RERUN_AFTER_FIX = "GLOSSARY_GUARD_RERUN_AFTER_FIX"
ENV_HARD_FAIL = "GLOSSARY_GUARD_HARD_FAIL"
ENV_LANGS = "GLOSSARY_GUARD_LANGS"

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off", ""}


class ConfigBase:
    # Attribut de classe pour le singleton
    _instance = None
    _locked: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def lock(self):
        if not self._locked:
            self._locked = True

    def __setattr__(self, name, value):
        if getattr(self, "_locked", False):
            raise AttributeError("Configuration is locked")
        super().__setattr__(name, value)


class Logger_Level(ConfigBase):
    level: int = logging.INFO
    console_level: int = logging.ERROR
    file_level: int = logging.DEBUG


class RunDefaults(ConfigBase):
    fix_mode: FixMode = FixMode.NEVER
    rerun_after_fix: bool = False
    hard_fail_on_error: bool = False
    langs: tuple[str, ...] = ()


def lock_config():
    """Verrouille la configuration pour empêcher les modifications ultérieures."""
    Logger_Level().lock()
    RunDefaults().lock()


# ============================================================
# 🔹 Lecture .env + environnement
# ============================================================


def _read_env(env_file: Optional[str] = None) -> dict[str, str]:
    """
    Fusionne le fichier .env et l'environnement (l'environnement gagne).

    Args:
        env_file: Chemin explicite du .env (None = recherche depuis le cwd)
    """
    values: dict[str, str] = {}

    path = env_file if env_file is not None else find_dotenv(usecwd=True)
    if path:
        for key, value in dotenv_values(path).items():
            if key.startswith(ENV_PREFIX) and value is not None:
                values[key] = value

    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            values[key] = value

    return values


def parse_bool(name: str, value: str) -> bool:
    """
    Interprète une valeur booléenne de configuration.

    Raises:
        ConfigError: Si la valeur n'est pas reconnue
    """
    key = value.strip().lower()
    if key in _TRUE_VALUES:
        return True
    if key in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name}: invalid boolean value {value!r}")


def parse_languages(value: str) -> tuple[str, ...]:
    """
    Découpe une liste de langues séparées par des virgules.

    Les espaces et entrées vides sont ignorés, les doublons supprimés
    en gardant le premier ordre d'apparition.

    Example:
        >>> parse_languages(" en, fr,,en ,de")
        ('en', 'fr', 'de')
    """
    langs: list[str] = []
    for part in value.split(","):
        code = part.strip()
        if code and code not in langs:
            langs.append(code)
    return tuple(langs)


def load_run_options(env_file: Optional[str] = None) -> RunOptions:
    """
    Construit les RunOptions depuis RunDefaults, le .env et l'environnement.

    Args:
        env_file: Chemin explicite du fichier .env

    Returns:
        RunOptions prêtes à être passées au Validator

    Raises:
        ConfigError: Si une variable contient une valeur invalide
    """
    env = _read_env(env_file)

    fix_mode = RunDefaults.fix_mode
    if ENV_FIX_MODE in env:
        try:
            fix_mode = FixMode.parse(env[ENV_FIX_MODE])
        except ValueError as exc:
            raise ConfigError(f"{ENV_FIX_MODE}: {exc}") from exc

    rerun = RunDefaults.rerun_after_fix
    if ENV_RERUN_AFTER_FIX in env:
        rerun = parse_bool(ENV_RERUN_AFTER_FIX, env[ENV_RERUN_AFTER_FIX])

    hard_fail = RunDefaults.hard_fail_on_error
    if ENV_HARD_FAIL in env:
        hard_fail = parse_bool(ENV_HARD_FAIL, env[ENV_HARD_FAIL])

    return RunOptions(
        fix_mode=fix_mode,
        rerun_after_fix=rerun,
        hard_fail_on_error=hard_fail,
    )


def load_declared_languages(env_file: Optional[str] = None) -> tuple[str, ...]:
    """Langues déclarées (GLOSSARY_GUARD_LANGS), ou RunDefaults.langs."""
    env = _read_env(env_file)
    if ENV_LANGS in env:
        return parse_languages(env[ENV_LANGS])
    return tuple(RunDefaults.langs)

"""
Module de configuration du logging pour glossary-guard.

Tous les modules du package obtiennent leur logger via `get_logger(__name__)`
pour une sortie cohérente console + fichier.

Fonctionnalités :
- Regroupement des logs par exécution dans logs/run_YYYYMMDD_HHMMSS/
- Création différée du fichier de log (pas de fichier vide si rien n'est loggé)
- Sortie console compatible avec la barre de progression tqdm
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .config import Logger_Level

DEFAULT_LOG_FILENAME = "validation.log"
PACKAGE_LOGGER_PREFIX = "glossary_guard"


# ============================================================
# 🔹 Gestionnaire de session de logs
# ============================================================


class LogSession:
    """
    Singleton regroupant tous les logs d'une exécution.

    Le répertoire logs/run_YYYYMMDD_HHMMSS/ n'est créé qu'au premier accès.
    `base_dir` peut être redirigé (tests, option CLI) avant ce premier accès.
    """

    _instance: Optional["LogSession"] = None
    _session_dir: Optional[Path] = None
    base_dir: Path = Path("logs")

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if LogSession._session_dir is not None:
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        LogSession._session_dir = LogSession.base_dir / f"run_{timestamp}"
        LogSession._session_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def get_session_dir(cls) -> Path:
        """Retourne le répertoire de la session en cours."""
        if cls._session_dir is None:
            cls()
        assert cls._session_dir is not None
        return cls._session_dir

    @classmethod
    def reset(cls, base_dir: Optional[Path] = None):
        """Reset la session (utile pour les tests)."""
        cls._instance = None
        cls._session_dir = None
        if base_dir is not None:
            cls.base_dir = Path(base_dir)


# ============================================================
# 🔹 Handlers de logging
# ============================================================


class TqdmLoggingHandler(logging.Handler):
    """
    Handler console qui passe par tqdm.write().

    Les messages s'affichent au-dessus de la barre de progression
    du Validator au lieu de la casser.
    """

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
        except Exception:
            self.handleError(record)


class LazyFileHandler(logging.Handler):
    """
    Handler qui crée le fichier de log seulement au premier message.

    Le répertoire de session est résolu à ce moment-là, ce qui permet
    d'importer le package sans toucher au disque.
    """

    def __init__(
        self,
        filename: Optional[Path] = None,
        mode: str = "a",
        encoding: str = "utf-8",
        level: int = logging.NOTSET,
        log_filename: str = DEFAULT_LOG_FILENAME,
    ):
        super().__init__(level)
        self.filename = filename
        self.log_filename = log_filename
        self.mode = mode
        self.encoding = encoding
        self._handler: Optional[logging.FileHandler] = None

    def _ensure_handler(self):
        """Crée le FileHandler sous-jacent si pas encore fait."""
        if self._handler is None:
            if self.filename is None:
                self.filename = LogSession.get_session_dir() / self.log_filename
            self.filename.parent.mkdir(parents=True, exist_ok=True)
            self._handler = logging.FileHandler(
                self.filename,
                mode=self.mode,
                encoding=self.encoding,
            )
            if self.formatter:
                self._handler.setFormatter(self.formatter)

    def emit(self, record):
        try:
            self._ensure_handler()
            if self._handler:
                self._handler.emit(record)
        except Exception:
            self.handleError(record)

    def close(self):
        if self._handler:
            self._handler.close()
            self._handler = None
        super().close()


# ============================================================
# 🔹 Configuration des loggers
# ============================================================


def setup_logger(
    name: str,
    log_dir: Optional[str] = None,
    level: int = Logger_Level.level,
    console_level: int = Logger_Level.console_level,
    file_level: int = Logger_Level.file_level,
    log_filename: str = DEFAULT_LOG_FILENAME,
) -> logging.Logger:
    """
    Configure un logger avec sortie console et fichier.

    Args:
        name: Nom du logger (généralement __name__ du module)
        log_dir: Répertoire des logs (None = répertoire de session)
        level: Niveau de logging global du logger
        console_level: Niveau pour la sortie console
        file_level: Niveau pour le fichier
        log_filename: Nom du fichier de log (défaut: "validation.log")

    Returns:
        Logger configuré avec handlers console et fichier

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Validation démarrée")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir is None:
        file_handler = LazyFileHandler(log_filename=log_filename)
    else:
        file_handler = LazyFileHandler(filename=Path(log_dir) / log_filename)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Les handlers sont portés par chaque logger du package
    logger.propagate = False

    return logger


def get_logger(name: str, log_filename: Optional[str] = None) -> logging.Logger:
    """
    Récupère un logger existant ou en crée un avec la configuration par défaut.

    Args:
        name: Nom du logger (généralement __name__ du module)
        log_filename: Nom optionnel du fichier de log (None = "validation.log")

    Returns:
        Logger configuré
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        return setup_logger(name, log_filename=log_filename or DEFAULT_LOG_FILENAME)

    return logger


def set_console_level(level: int) -> None:
    """
    Change le niveau console de tous les loggers déjà créés par le package.

    Utilisé par l'option CLI --verbose.
    """
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not name.startswith(PACKAGE_LOGGER_PREFIX):
            continue
        if not isinstance(logger, logging.Logger):
            continue
        for handler in logger.handlers:
            if isinstance(handler, TqdmLoggingHandler):
                handler.setLevel(level)


def get_session_log_path(filename: str = DEFAULT_LOG_FILENAME) -> Path:
    """
    Retourne le chemin complet d'un fichier de log dans la session.

    Example:
        >>> print(get_session_log_path())
        logs/run_20251023_143022/validation.log
    """
    return LogSession.get_session_dir() / filename

"""
Registre thread-safe des règles et séquenceur du pipeline.

Le registre associe un nom normalisé (trim + minuscules) à une règle.
Toutes les listes retournées sont des copies : le pipeline peut itérer
un instantané pendant qu'un autre thread ré-enregistre des règles.
"""

import threading

from ..logger import get_logger
from .base import CheckUnit
from .errors import RegistryError

logger = get_logger(__name__)


def normalize_name(name: str) -> str:
    """Clé de registre : nom sans espaces de bord, en minuscules."""
    return name.strip().lower()


def _sort_key(unit: CheckUnit) -> tuple[int, str, str]:
    return (unit.priority, normalize_name(unit.name), unit.name)


class CheckRegistry:
    """
    Stockage des règles indexé par nom normalisé.

    Les écritures (register, reset) et les lectures (lookup, list_*)
    sont sérialisées par un même verrou simple : deux lectures ne
    s'exécutent pas en parallèle. Chaque lecture ne fait qu'une copie du
    dictionnaire interne et le tri a lieu hors verrou, la section
    critique reste donc courte.

    Example:
        >>> registry = CheckRegistry()
        >>> registry.register(UNIT)
        False
        >>> registry.register(UNIT)  # ré-enregistrement idempotent
        True
        >>> critical, normal = registry.split()
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._by_name: dict[str, CheckUnit] = {}

    def register(self, unit: CheckUnit) -> bool:
        """
        Ajoute ou remplace une règle.

        Args:
            unit: Règle à enregistrer

        Returns:
            True si une règle de même nom normalisé a été remplacée

        Raises:
            RegistryError: Si la règle est None ou si son nom est vide
        """
        if unit is None:
            raise RegistryError("register: unit is None")

        key = normalize_name(unit.name or "")
        if not key:
            raise RegistryError("register: empty name")

        with self._lock:
            replaced = key in self._by_name
            self._by_name[key] = unit

        if replaced:
            logger.debug(f"🔁 Règle remplacée : {key}")
        return replaced

    def lookup(self, name: str) -> CheckUnit | None:
        """Retourne la règle de ce nom (insensible à la casse), ou None."""
        with self._lock:
            return self._by_name.get(normalize_name(name))

    def list_all(self) -> list[CheckUnit]:
        """Instantané non trié de toutes les règles."""
        with self._lock:
            return list(self._by_name.values())

    def list_sorted(self) -> list[CheckUnit]:
        """Instantané trié par (priorité, nom normalisé, nom d'origine)."""
        return sorted(self.list_all(), key=_sort_key)

    def split(self) -> tuple[list[CheckUnit], list[CheckUnit]]:
        """
        Sépare les règles critiques (fail-fast) des règles normales.

        Returns:
            Tuple (critical, normal), les deux dans l'ordre de list_sorted().
            Seul l'ordre des critiques est garanti par le contrat.
        """
        critical: list[CheckUnit] = []
        normal: list[CheckUnit] = []
        for unit in self.list_sorted():
            if unit.fail_fast:
                critical.append(unit)
            else:
                normal.append(unit)
        return critical, normal

    def reset(self) -> None:
        """Vide le registre (isolation des tests, rechargement)."""
        with self._lock:
            self._by_name = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_name)

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None


# Registre du processus, peuplé par register_builtin_rules()
_default_registry = CheckRegistry()


def default_registry() -> CheckRegistry:
    """Retourne le registre partagé du processus."""
    return _default_registry

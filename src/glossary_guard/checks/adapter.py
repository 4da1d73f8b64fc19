"""
Adaptateur fonction → règle enregistrable.

Permet de déclarer une règle à partir d'une simple fonction `run`
(souvent un appel à `run_with_fix` avec une recette) sans écrire de classe.
"""

import traceback

from ..logger import get_logger
from .base import Artifact, CheckFunc, CheckOutcome, RunOptions
from .context import RunContext
from .errors import RegistryError
from .runner import outcome_error

logger = get_logger(__name__)


class CheckAdapter:
    """
    Règle construite à partir d'une fonction `run`.

    Satisfait le protocole CheckUnit. Le contexte est vérifié avant chaque
    exécution ; avec `recover=True`, toute exception levée par `run` est
    convertie en outcome ERROR ("panic in check run: ...") qui propage
    l'artefact d'entrée inchangé.

    Attributes:
        name: Nom de la règle
        fail_fast: Règle critique (le pipeline peut s'arrêter sur FAIL/ERROR)
        priority: Ordre parmi les règles critiques (plus petit = plus tôt)
        recover: Intercepter les exceptions de `run`
    """

    def __init__(
        self,
        name: str,
        run: CheckFunc,
        fail_fast: bool = False,
        priority: int = 0,
        recover: bool = True,
    ):
        self._name = name
        self._run = run
        self._fail_fast = fail_fast
        self._priority = priority
        self.recover = recover

    @property
    def name(self) -> str:
        return self._name

    @property
    def fail_fast(self) -> bool:
        return self._fail_fast

    @property
    def priority(self) -> int:
        return self._priority

    def run(
        self, ctx: RunContext, artifact: Artifact, opts: RunOptions
    ) -> CheckOutcome:
        err = ctx.err()
        if err is not None:
            return outcome_error(self._name, str(err), artifact)

        if not self.recover:
            out = self._run(ctx, artifact, opts)
        else:
            try:
                out = self._run(ctx, artifact, opts)
            except Exception as exc:
                logger.error(f"💥 Exception dans la règle {self._name} : {exc!r}")
                return outcome_error(
                    self._name,
                    f"panic in check run: {exc!r}\n{traceback.format_exc()}",
                    artifact,
                )

        if not isinstance(out, CheckOutcome):
            logger.error(f"💥 La règle {self._name} a retourné {type(out).__name__}")
            return outcome_error(
                self._name,
                f"invalid check outcome: expected CheckOutcome, got {type(out).__name__}",
                artifact,
            )

        # Le nom du résultat est toujours renseigné
        if not out.result.name:
            out.result.name = self._name
        return out

    def __repr__(self) -> str:
        return (
            f"CheckAdapter(name={self._name!r}, fail_fast={self._fail_fast}, "
            f"priority={self._priority})"
        )


def new_check_adapter(
    name: str,
    run: CheckFunc,
    fail_fast: bool = False,
    priority: int = 0,
    recover: bool = True,
) -> CheckAdapter:
    """
    Construit un CheckAdapter après validation des arguments.

    Args:
        name: Nom de la règle (non vide)
        run: Fonction d'exécution (ctx, artifact, opts) → CheckOutcome
        fail_fast: Règle critique
        priority: Ordre parmi les règles critiques
        recover: Convertir les exceptions de `run` en ERROR

    Returns:
        CheckAdapter prêt à être enregistré

    Raises:
        RegistryError: Si le nom est vide ou `run` absent

    Example:
        >>> UNIT = new_check_adapter(
        ...     "ensure-valid-extension", run_ensure_csv, fail_fast=True, priority=1
        ... )
    """
    if not name or not name.strip():
        raise RegistryError("new_check_adapter: empty name")
    if run is None:
        raise RegistryError("new_check_adapter: run function is None")
    return CheckAdapter(name, run, fail_fast=fail_fast, priority=priority, recover=recover)

"""
Validation complète d'un fichier glossaire.

Enchaîne les règles du registre sur un même artefact :
1. Règles critiques (fail-fast) dans l'ordre (priorité, nom)
2. Règles normales, dans l'ordre trié du registre

L'état produit par chaque règle (données corrigées, chemin renommé) est
propagé à la règle suivante.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from tqdm import tqdm

from .checks.base import Artifact, CheckOutcome, RunOptions, Status
from .checks.context import RunContext
from .checks.errors import HardFailError, PipelineCancelledError
from .checks.registry import CheckRegistry, default_registry
from .logger import get_logger

logger = get_logger(__name__)


@dataclass
class Summary:
    """
    Bilan d'une validation.

    Attributes:
        file_path: Chemin fourni au départ
        pass_count, warn_count, fail_count, error_count: Compteurs par statut
        outcomes: Résultats des règles exécutées, dans l'ordre
        early_exit: Le pipeline s'est arrêté avant la dernière règle
        early_check: Règle responsable de l'arrêt
        early_status: Statut de cette règle
        applied_fixes: Au moins une correction a modifié l'artefact
        final_data: Contenu après toutes les corrections
        final_path: Chemin après toutes les corrections
    """

    file_path: str
    pass_count: int = 0
    warn_count: int = 0
    fail_count: int = 0
    error_count: int = 0
    outcomes: list[CheckOutcome] = field(default_factory=list)
    early_exit: bool = False
    early_check: str = ""
    early_status: Optional[Status] = None
    applied_fixes: bool = False
    final_data: bytes = b""
    final_path: str = ""

    @property
    def ok(self) -> bool:
        """True si aucune règle n'a rendu FAIL/ERROR et que le pipeline est allé au bout."""
        return self.fail_count == 0 and self.error_count == 0 and not self.early_exit

    def count(self, status: Status) -> None:
        if status == Status.PASS:
            self.pass_count += 1
        elif status == Status.WARN:
            self.warn_count += 1
        elif status == Status.FAIL:
            self.fail_count += 1
        else:
            self.error_count += 1


def _log_outcome(outcome: CheckOutcome) -> None:
    status = outcome.status
    if status == Status.PASS:
        logger.debug(f"✅ {outcome.name}: {outcome.message}")
    elif status == Status.WARN:
        logger.warning(f"⚠️ {outcome.name}: {outcome.message}")
    elif status == Status.FAIL:
        logger.warning(f"❌ {outcome.name}: {outcome.message}")
    else:
        logger.error(f"💥 {outcome.name}: {outcome.message}")


def validate(
    ctx: RunContext,
    file_path: str,
    data: bytes,
    langs: Sequence[str] = (),
    opts: Optional[RunOptions] = None,
    registry: Optional[CheckRegistry] = None,
    show_progress: bool = False,
) -> Summary:
    """
    Exécute toutes les règles enregistrées sur un fichier.

    Args:
        ctx: Contexte d'annulation
        file_path: Chemin (ou nom logique) du fichier
        data: Contenu brut
        langs: Langues déclarées
        opts: Réglages d'exécution (RunOptions() si None)
        registry: Registre des règles (registre par défaut si None)
        show_progress: Afficher une barre de progression tqdm

    Returns:
        Bilan de la validation

    Raises:
        PipelineCancelledError: Si le contexte est annulé entre deux règles
        HardFailError: Si une règle rend ERROR et que hard_fail_on_error est actif

    Example:
        >>> register_builtin_rules(registry)
        >>> summary = validate(background(), "glossary.csv", data, ["en", "fr"],
        ...                    RunOptions(fix_mode=FixMode.IF_NOT_PASSING, rerun_after_fix=True),
        ...                    registry=registry)
        >>> if summary.applied_fixes:
        ...     Path(summary.final_path).write_bytes(summary.final_data)
    """
    if opts is None:
        opts = RunOptions()
    if registry is None:
        registry = default_registry()

    critical, normal = registry.split()
    units = critical + normal

    artifact = Artifact(data=data, path=file_path, langs=tuple(langs))
    summary = Summary(file_path=file_path, final_data=artifact.data, final_path=artifact.path)

    logger.info(
        f"🔍 Validation de {file_path} : {len(critical)} règle(s) critique(s), "
        f"{len(normal)} règle(s) normale(s)"
    )

    with tqdm(
        total=len(units),
        desc="Validation",
        unit="règle",
        ncols=100,
        disable=not show_progress,
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
    ) as pbar:
        for unit in units:
            if ctx.err() is not None:
                summary.early_exit = True
                summary.early_check = "context canceled"
                summary.early_status = Status.ERROR
                logger.error(f"❌ Validation annulée avant {unit.name}")
                raise PipelineCancelledError("context canceled", summary)

            outcome = unit.run(ctx, artifact, opts)
            summary.count(outcome.status)
            summary.outcomes.append(outcome)
            _log_outcome(outcome)

            final = outcome.final
            next_data = artifact.data if final.data is None else final.data
            next_path = final.path or artifact.path
            if final.changed:
                summary.applied_fixes = True
            artifact = Artifact(data=next_data, path=next_path, langs=artifact.langs)
            summary.final_data = artifact.data
            summary.final_path = artifact.path

            pbar.update(1)

            if unit.fail_fast and outcome.status in (Status.FAIL, Status.ERROR):
                summary.early_exit = True
                summary.early_check = outcome.name
                summary.early_status = outcome.status
                logger.warning(f"⛔ Arrêt anticipé sur {outcome.name} ({outcome.status})")
                if outcome.status == Status.ERROR and opts.hard_fail_on_error:
                    raise HardFailError(
                        f'fail-fast on ERROR at "{outcome.name}": {outcome.message}',
                        summary,
                    )
                return summary

    if opts.hard_fail_on_error and summary.error_count:
        first = next(
            (o.message for o in summary.outcomes if o.status == Status.ERROR),
            "one or more checks returned ERROR",
        )
        raise HardFailError(first or "one or more checks returned ERROR", summary)

    logger.info(
        f"✅ Validation terminée : {summary.pass_count} PASS, {summary.warn_count} WARN, "
        f"{summary.fail_count} FAIL, {summary.error_count} ERROR"
    )
    return summary

"""
Types de base et interfaces du moteur de validation.

Ce module définit les statuts, la politique de correction, l'artefact
qui circule dans le pipeline, les résultats de validation/correction,
la recette déclarative (RunRecipe) et le protocole que toute règle
doit implémenter (CheckUnit).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .context import RunContext


# =============================================================================
# Statuts et politique de correction
# =============================================================================


class Status(str, Enum):
    """Catégorie du résultat d'une règle."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"
    ERROR = "ERROR"

    def __str__(self) -> str:
        return self.value


class FixMode(str, Enum):
    """
    Politique d'auto-correction choisie par l'appelant.

    - NEVER : jamais de correction
    - ONLY_IF_FAILED : seulement sur FAIL/ERROR
    - IF_NOT_PASSING : sur WARN/FAIL/ERROR
    - ALWAYS : toujours, même sur PASS (la correction doit alors être un no-op)
    """

    NEVER = "never"
    ONLY_IF_FAILED = "only-if-failed"
    IF_NOT_PASSING = "if-not-passing"
    ALWAYS = "always"

    @classmethod
    def parse(cls, value: "str | FixMode") -> "FixMode":
        """
        Convertit une valeur texte (CLI, .env) en FixMode.

        Accepte aussi les variantes avec underscores ("if_not_passing").

        Raises:
            ValueError: Si la valeur ne correspond à aucun mode
        """
        if isinstance(value, FixMode):
            return value
        key = value.strip().lower().replace("_", "-")
        for mode in cls:
            if mode.value == key:
                return mode
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"unknown fix mode {value!r} (expected one of: {allowed})")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RunOptions:
    """
    Réglages d'une exécution, fournis par l'appelant à chaque lancement.

    Attributes:
        fix_mode: Politique de correction
        rerun_after_fix: Re-valider après une correction appliquée
        hard_fail_on_error: Indice d'escalade pour l'appelant (le moteur
                            ne l'interprète pas, le Validator oui)
    """

    fix_mode: FixMode = FixMode.NEVER
    rerun_after_fix: bool = False
    hard_fail_on_error: bool = False


# =============================================================================
# Artefact
# =============================================================================


@dataclass(frozen=True)
class Artifact:
    """
    Unité de travail qui circule de règle en règle (un fichier glossaire).

    `bytes` étant immuable, aucune étape ne peut modifier le tampon d'une
    autre : une correction produit toujours un nouvel Artifact.

    Attributes:
        data: Contenu brut du fichier
        path: Identifiant logique (peut être renommé par une correction)
        langs: Langues déclarées par l'appelant, en lecture seule

    Example:
        >>> a = Artifact(data=b"term;description\\n", path="glossary.csv", langs=["en", "fr"])
        >>> a.langs
        ('en', 'fr')
    """

    data: bytes = b""
    path: str = ""
    langs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accepte list/bytearray en entrée, stocke des valeurs immuables
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))
        if not isinstance(self.langs, tuple):
            object.__setattr__(self, "langs", tuple(self.langs))


# =============================================================================
# Résultats
# =============================================================================


@dataclass
class ValidationResult:
    """
    Résultat tri-état d'une fonction de validation.

    Attributes:
        ok: True si la validation passe
        msg: Message lisible
        err: Erreur d'infrastructure (annulation, exception attrapée).
             Si présent, ok est forcé à False et le moteur rapporte ERROR.
    """

    ok: bool
    msg: str = ""
    err: BaseException | None = None

    def __post_init__(self) -> None:
        if self.err is not None:
            self.ok = False


@dataclass
class FixResult:
    """
    Nouvel état proposé par une correction.

    Attributes:
        data: Nouveaux octets (None = inchangé)
        path: Nouveau chemin ("" = inchangé)
        changed: Drapeau explicite ; le moteur re-vérifie par comparaison
        note: Diagnostic de ce qui a été fait
    """

    data: bytes | None = None
    path: str = ""
    changed: bool = False
    note: str = ""


@dataclass
class CheckResult:
    """Statut et message d'une règle, sans information de correction."""

    name: str
    status: Status
    message: str = ""

    def __repr__(self) -> str:
        """Représentation pour le debug."""
        return f"[{self.status.value}] {self.name}: {self.message}"


@dataclass
class CheckOutcome:
    """
    Résultat final d'une règle : statut + état de l'artefact à propager.

    `final` porte toujours les données/chemin à passer à la règle suivante,
    même si rien n'a changé.
    """

    result: CheckResult
    final: FixResult = field(default_factory=FixResult)

    @property
    def name(self) -> str:
        return self.result.name

    @property
    def status(self) -> Status:
        return self.result.status

    @property
    def message(self) -> str:
        return self.result.message


# =============================================================================
# Signatures fonctionnelles
# =============================================================================

ValidateFunc = Callable[["RunContext", Artifact], ValidationResult]
FixFunc = Callable[["RunContext", Artifact], FixResult]
CheckFunc = Callable[["RunContext", Artifact, RunOptions], CheckOutcome]


# =============================================================================
# Recette déclarative
# =============================================================================


@dataclass(frozen=True)
class RunRecipe:
    """
    Contrat déclaratif « valider → corriger peut-être → re-valider peut-être ».

    Une règle fournit une recette au moteur (`run_with_fix`) au lieu
    d'écrire sa propre machine à états.

    Attributes:
        name: Nom de la règle (obligatoire)
        validate: Fonction de validation (obligatoire)
        fix: Fonction de correction optionnelle
        pass_msg: Message quand la validation passe
        fixed_msg: Message quand la correction est re-validée avec succès
        applied_msg: Message quand la correction est appliquée sans re-validation
        still_bad_msg: Préfixe quand la re-validation échoue encore
        fail_as: Statut d'échec (None = FAIL)
        status_after_fixed: Statut après correction re-validée (None = WARN)

    Example:
        >>> recipe = RunRecipe(
        ...     name="ensure-valid-extension",
        ...     validate=validate_csv_ext,
        ...     fix=fix_csv_ext,
        ...     pass_msg="file extension OK: .csv",
        ...     status_after_fixed=Status.PASS,
        ... )
        >>> outcome = run_with_fix(ctx, artifact, opts, recipe)
    """

    name: str
    validate: ValidateFunc | None
    fix: FixFunc | None = None

    pass_msg: str = ""
    fixed_msg: str = ""
    applied_msg: str = ""
    still_bad_msg: str = ""

    fail_as: Status | None = None
    status_after_fixed: Status | None = None


# =============================================================================
# Contrat public d'une règle
# =============================================================================


@runtime_checkable
class CheckUnit(Protocol):
    """
    Interface (Protocol) de toutes les règles enregistrables.

    Une règle doit fournir :
    1. `name` : identifiant stable (insensible à la casse pour le registre)
    2. `fail_fast` : True si un FAIL/ERROR peut arrêter le pipeline
    3. `priority` : ordre d'exécution parmi les règles fail-fast (plus petit = plus tôt)
    4. `run()` : point d'entrée unique, retourne toujours l'état à propager

    Example:
        >>> class MyCheck:
        ...     name = "my-check"
        ...     fail_fast = False
        ...     priority = 100
        ...
        ...     def run(self, ctx, artifact, opts):
        ...         return run_with_fix(ctx, artifact, opts, MY_RECIPE)
    """

    @property
    def name(self) -> str:
        ...

    @property
    def fail_fast(self) -> bool:
        ...

    @property
    def priority(self) -> int:
        ...

    def run(
        self, ctx: "RunContext", artifact: Artifact, opts: RunOptions
    ) -> CheckOutcome:
        """
        Exécute la validation et éventuellement la correction.

        Returns:
            CheckOutcome dont `final` contient les données/chemin à propager
        """
        ...

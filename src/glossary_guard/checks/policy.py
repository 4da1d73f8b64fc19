"""
Politique de correction et propagation de l'artefact.

Deux fonctions pures, testables sans exécuter la moindre règle.
"""

from .base import Artifact, FixMode, FixResult, Status


def should_attempt_fix(fix_mode: FixMode, status: Status) -> bool:
    """
    Indique si la politique autorise une correction pour un statut donné.

    Args:
        fix_mode: Politique configurée
        status: Statut courant de la règle

    Returns:
        True si une correction peut être tentée

    Example:
        >>> should_attempt_fix(FixMode.ONLY_IF_FAILED, Status.WARN)
        False
        >>> should_attempt_fix(FixMode.IF_NOT_PASSING, Status.WARN)
        True
    """
    if fix_mode is FixMode.ALWAYS:
        return True
    if fix_mode is FixMode.IF_NOT_PASSING:
        return status is not Status.PASS
    if fix_mode is FixMode.ONLY_IF_FAILED:
        return status in (Status.FAIL, Status.ERROR)
    return False


def propagate_after_fix(
    artifact: Artifact, fix: FixResult
) -> tuple[bytes, str, bool]:
    """
    Fusionne le résultat d'une correction avec l'artefact d'entrée.

    On part des données/chemin d'entrée ; on adopte les données proposées
    si elles diffèrent octet par octet, le chemin proposé s'il est non vide
    et différent. Le drapeau `changed` de la correction force le changement
    même sans différence visible.

    Args:
        artifact: Artefact d'entrée de la correction
        fix: Résultat proposé par la correction

    Returns:
        Tuple (data, path, changed) pour l'étape suivante
    """
    out_data, out_path = artifact.data, artifact.path
    changed = False

    if fix.data is not None and fix.data != artifact.data:
        out_data = bytes(fix.data)
        changed = True
    if fix.path and fix.path != artifact.path:
        out_path = fix.path
        changed = True
    if fix.changed:
        changed = True

    return out_data, out_path, changed

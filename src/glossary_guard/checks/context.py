"""
Contexte d'annulation coopérative.

Le moteur ne pose aucun timeout lui-même : l'appelant borne le temps
d'exécution en annulant le contexte (ou en lui donnant une échéance).
Les règles et le moteur interrogent `ctx.err()` aux points de contrôle.
"""

import threading
import time
from typing import Callable

from .errors import CancelledError, ContextError, DeadlineExceededError


class RunContext:
    """
    Jeton d'annulation partagé par une exécution du pipeline.

    Basé sur un `threading.Event` : un autre thread peut appeler `cancel()`
    pendant qu'une règle tourne, la règle le verra à son prochain point
    de contrôle.

    Attributes:
        deadline: Instant `time.monotonic()` au-delà duquel le contexte est
                  considéré expiré (None = pas d'échéance)

    Example:
        >>> ctx = with_timeout(5.0)
        >>> if ctx.err() is not None:
        ...     return ValidationResult(ok=False, msg="validation cancelled", err=ctx.err())
    """

    def __init__(self, deadline: float | None = None):
        self._event = threading.Event()
        self._reason: ContextError | None = None
        self._lock = threading.Lock()
        self.deadline = deadline

    def cancel(self, reason: str | None = None) -> None:
        """
        Annule le contexte. Idempotent : seule la première raison est gardée.

        Args:
            reason: Message d'annulation (défaut: "context canceled")
        """
        with self._lock:
            if self._reason is None:
                self._reason = CancelledError(reason) if reason else CancelledError()
            self._event.set()

    def err(self) -> ContextError | None:
        """
        Retourne l'erreur du contexte sans bloquer, None s'il est actif.

        Returns:
            CancelledError si annulé, DeadlineExceededError si l'échéance
            est passée, None sinon
        """
        if self._event.is_set():
            return self._reason
        if self.deadline is not None and time.monotonic() >= self.deadline:
            with self._lock:
                if self._reason is None:
                    self._reason = DeadlineExceededError()
                self._event.set()
            return self._reason
        return None

    @property
    def cancelled(self) -> bool:
        """True si le contexte est annulé ou expiré."""
        return self.err() is not None

    def raise_if_cancelled(self) -> None:
        """Lève l'erreur du contexte s'il n'est plus actif."""
        err = self.err()
        if err is not None:
            raise err

    def __repr__(self) -> str:
        err = self.err()
        state = "active" if err is None else str(err)
        return f"RunContext({state})"


def background() -> RunContext:
    """Contexte jamais annulé (sauf appel explicite à cancel())."""
    return RunContext()


def with_cancel() -> tuple[RunContext, Callable[..., None]]:
    """
    Crée un contexte et sa fonction d'annulation.

    Returns:
        Tuple (ctx, cancel) où cancel() annule ctx

    Example:
        >>> ctx, cancel = with_cancel()
        >>> cancel()
        >>> ctx.cancelled
        True
    """
    ctx = RunContext()
    return ctx, ctx.cancel


def with_timeout(seconds: float) -> RunContext:
    """Contexte qui expire `seconds` secondes après sa création."""
    return RunContext(deadline=time.monotonic() + seconds)

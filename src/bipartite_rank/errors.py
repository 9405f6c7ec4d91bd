"""Error hierarchy for bipartite_rank."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class BipartiteRankError(Exception):
    """Base exception for bipartite_rank failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}

    def log_message(self) -> str:
        if not self.context:
            return str(self)
        return f"{self}: {self.context}"


class InvalidInputType(BipartiteRankError):
    """Input is neither a supported edge list nor a supported matrix."""


class UnresolvableColumn(BipartiteRankError):
    """A designated sender, receiver or weight column does not exist."""


class InvalidWeight(BipartiteRankError):
    """Edge weights are non-numeric, non-finite or negative."""


class ConfigError(BipartiteRankError):
    """Invalid parameter value."""


class NonConvergence(BipartiteRankError):
    """Iteration budget exhausted before the tolerance was met."""


class NonConvergenceWarning(RuntimeWarning):
    """Emitted when a rank estimate stops at max_iter without converging."""


__all__ = [
    "BipartiteRankError",
    "InvalidInputType",
    "UnresolvableColumn",
    "InvalidWeight",
    "ConfigError",
    "NonConvergence",
    "NonConvergenceWarning",
]

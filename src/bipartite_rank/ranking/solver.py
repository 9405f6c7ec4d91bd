"""Damped alternating power iteration shared by all bipartite normalizers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Optional
import warnings

import numpy as np
import scipy.sparse

from bipartite_rank.analysis.degrees import column_degrees, non_isolates, row_degrees
from bipartite_rank.config import RankConfig
from bipartite_rank.errors import NonConvergence, NonConvergenceWarning
from bipartite_rank.logging_utils import progress_logger
from bipartite_rank.ranking.normalizers import get_normalizer

logger = logging.getLogger(__name__)


class RankStatus(Enum):
    CONVERGED = "converged"
    MAX_ITER_EXCEEDED = "max_iter_exceeded"


@dataclass
class RankResult:
    """Scores of the non-isolated nodes plus how the iteration ended.

    ``rows`` and ``columns`` hold scores for ``row_index`` and
    ``column_index`` (dense matrix indices, ascending); either is None when
    that mode was not requested.
    """

    rows: Optional[np.ndarray]
    columns: Optional[np.ndarray]
    row_index: np.ndarray
    column_index: np.ndarray
    status: RankStatus
    iterations: int
    delta: float
    normalizer: str
    history: list = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.status is RankStatus.CONVERGED

    def raise_for_status(self) -> "RankResult":
        if not self.converged:
            raise NonConvergence(
                f"{self.normalizer} did not converge in {self.iterations} iterations "
                f"(last delta {self.delta:.3g})",
                context={"iterations": self.iterations, "delta": self.delta},
            )
        return self


class TransitionKernel:
    """Sparse matrix-vector product for one transition direction."""

    def __init__(self, matrix):
        self.matrix = matrix.tocsr()

    def spmv(self, x):
        return self.matrix.dot(x)


def initial_vector(degrees):
    """Uniform vector summing to 1 over non-isolates, 0 on isolates."""
    vector = np.zeros(len(degrees), dtype=np.float64)
    active = np.asarray(degrees) > 0
    count = int(active.sum())
    if count:
        vector[active] = 1.0 / count
    return vector


def _rescale(vector):
    total = vector.sum()
    if total > 0:
        vector /= total
    return vector


def solve(
    matrix,
    normalizer="HITS",
    alpha=0.85,
    beta=0.85,
    max_iter=200,
    tol=1.0e-4,
    return_mode="both",
    verbose=False,
):
    """
    Estimate bipartite ranks of the rows and columns of ``matrix``.

    Parameters:
    -----------
    matrix : scipy.sparse matrix
        Weighted bipartite adjacency matrix W (rows x columns)
    normalizer : str or Normalizer
        HITS, CoHITS, BGRM or BiRank
    alpha, beta : float
        Damping factors for the row and column updates, in (0, 1]
    max_iter : int
        Iteration budget
    tol : float
        Stop once the combined L1 change of both vectors drops below tol
    return_mode : str
        "rows", "columns" or "both"

    Returns:
    --------
    RankResult : Scores with isolates removed, status and iteration trace
    """
    config = RankConfig(
        normalizer=getattr(normalizer, "name", normalizer),
        alpha=alpha,
        beta=beta,
        max_iter=max_iter,
        tol=tol,
        return_mode=return_mode,
        verbose=verbose,
    ).validate()
    strategy = get_normalizer(normalizer)
    progress = progress_logger(logger, config.verbose)

    matrix = scipy.sparse.csr_matrix(matrix, dtype=np.float64)
    k_d = row_degrees(matrix)
    k_p = column_degrees(matrix)
    row_index = non_isolates(k_d)
    column_index = non_isolates(k_p)

    r0 = initial_vector(k_d)
    c0 = initial_vector(k_p)
    r, c = r0.copy(), c0.copy()
    history = []
    status = RankStatus.CONVERGED
    iterations = 0
    delta = 0.0

    if matrix.nnz == 0:
        progress("Empty bipartite graph, nothing to rank")
    else:
        s_d, s_p = strategy.transitions(matrix, k_d, k_p)
        to_rows = TransitionKernel(s_d)
        to_cols = TransitionKernel(s_p)

        status = RankStatus.MAX_ITER_EXCEEDED
        for iterations in range(1, config.max_iter + 1):
            r_new = config.alpha * to_rows.spmv(c) + (1 - config.alpha) * r0
            if strategy.rescale:
                _rescale(r_new)
            c_new = config.beta * to_cols.spmv(r_new) + (1 - config.beta) * c0
            if strategy.rescale:
                _rescale(c_new)

            delta = float(np.abs(r_new - r).sum() + np.abs(c_new - c).sum())
            history.append(delta)
            r, c = r_new, c_new
            progress("Iteration %d: delta %.3e", iterations, delta)

            if delta < config.tol:
                status = RankStatus.CONVERGED
                break

    if status is RankStatus.MAX_ITER_EXCEEDED:
        message = (
            f"{strategy.name} did not converge within max_iter={config.max_iter} "
            f"(delta {delta:.3e} >= tol {config.tol:.3e})"
        )
        logger.warning(message)
        warnings.warn(message, NonConvergenceWarning, stacklevel=2)
    else:
        progress("%s converged after %d iteration(s)", strategy.name, iterations)

    want_rows = config.return_mode in ("rows", "both")
    want_cols = config.return_mode in ("columns", "both")
    return RankResult(
        rows=r[row_index].copy() if want_rows else None,
        columns=c[column_index].copy() if want_cols else None,
        row_index=row_index,
        column_index=column_index,
        status=status,
        iterations=iterations,
        delta=delta,
        normalizer=strategy.name,
        history=history,
    )

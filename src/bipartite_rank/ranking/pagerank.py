"""One-mode PageRank on a (projected) adjacency matrix."""

from __future__ import annotations

import logging
import warnings

import numpy as np
import scipy.sparse

from bipartite_rank.analysis.degrees import inverse_degrees, non_isolates, row_degrees
from bipartite_rank.config import RankConfig
from bipartite_rank.errors import ConfigError, NonConvergenceWarning
from bipartite_rank.logging_utils import progress_logger
from bipartite_rank.ranking.solver import RankResult, RankStatus, TransitionKernel

logger = logging.getLogger(__name__)


def pagerank(adjacency, alpha=0.85, max_iter=200, tol=1.0e-4, keep_isolates=False, verbose=False):
    """
    PageRank of a square, weighted adjacency matrix.

    Mass flows along row -> column entries, with teleportation to a uniform
    vector and dangling nodes (no out-weight) spreading their mass uniformly.
    Returned scores sum to 1; when isolates are dropped the remaining
    scores are renormalized.

    Parameters:
    -----------
    adjacency : scipy.sparse matrix or numpy array
        Square adjacency matrix, e.g. from project_rows
    alpha : float
        Damping factor in (0, 1]
    max_iter : int
        Iteration budget
    tol : float
        L1 convergence tolerance
    keep_isolates : bool
        Keep nodes with no incident edges in the result

    Returns:
    --------
    RankResult : Scores in ``rows``; ``columns`` is None
    """
    config = RankConfig(alpha=alpha, max_iter=max_iter, tol=tol, verbose=verbose).validate()
    progress = progress_logger(logger, config.verbose)

    A = scipy.sparse.csr_matrix(adjacency, dtype=np.float64)
    n, m = A.shape
    if n != m:
        raise ConfigError(f"pagerank needs a square matrix, got {n} x {m}")

    out_degree = row_degrees(A)
    incident = out_degree + np.asarray(A.sum(axis=0)).ravel()
    index = np.arange(n) if keep_isolates else non_isolates(incident)

    iterations = 0
    delta = 0.0
    history = []
    x = np.full(n, 1.0 / n) if n else np.zeros(0)
    status = RankStatus.CONVERGED

    if n:
        # Column-stochastic transpose: x_new = alpha * P.T x + ...
        kernel = TransitionKernel((scipy.sparse.diags(inverse_degrees(out_degree)) @ A).T)
        dangling = out_degree == 0
        teleport = np.full(n, 1.0 / n)

        status = RankStatus.MAX_ITER_EXCEEDED
        for iterations in range(1, config.max_iter + 1):
            x_new = config.alpha * (kernel.spmv(x) + x[dangling].sum() * teleport)
            x_new += (1 - config.alpha) * teleport
            delta = float(np.abs(x_new - x).sum())
            history.append(delta)
            x = x_new
            progress("Iteration %d: delta %.3e", iterations, delta)
            if delta < config.tol:
                status = RankStatus.CONVERGED
                break

    if status is RankStatus.MAX_ITER_EXCEEDED:
        message = f"PageRank did not converge within max_iter={config.max_iter} (delta {delta:.3e})"
        logger.warning(message)
        warnings.warn(message, NonConvergenceWarning, stacklevel=2)

    scores = x[index].copy()
    total = scores.sum()
    if total > 0:
        scores /= total

    return RankResult(
        rows=scores,
        columns=None,
        row_index=index,
        column_index=np.zeros(0, dtype=np.intp),
        status=status,
        iterations=iterations,
        delta=delta,
        normalizer="PageRank",
        history=history,
    )

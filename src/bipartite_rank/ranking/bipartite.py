"""Public entry points: build the matrix, rank it, label and format the scores."""

from __future__ import annotations

import logging
from typing import Any, Optional

import pandas as pd

from bipartite_rank.config import RankConfig
from bipartite_rank.logging_utils import progress_logger
from bipartite_rank.matrix.builder import EDGELIST, BipartiteMatrix, build
from bipartite_rank.ranking.solver import RankResult, solve

logger = logging.getLogger(__name__)

MATRIX_ID_NAME = "ID"
RANK_COLUMN = "rank"


def estimate_ranks(
    data: Any,
    config: Optional[RankConfig] = None,
    row_labels: Optional[Any] = None,
    column_labels: Optional[Any] = None,
    **options: Any,
) -> tuple[BipartiteMatrix, RankResult]:
    """Build ``W`` from ``data`` and run the solver, without formatting.

    Options are the fields of :class:`RankConfig`; an explicit ``config``
    takes their place.
    """
    if config is None:
        config = RankConfig.from_mapping(options)
    else:
        config.validate()
    progress = progress_logger(logger, config.verbose)

    graph = build(
        data,
        sender_name=config.sender_name,
        receiver_name=config.receiver_name,
        weight_name=config.weight_name,
        duplicates=config.duplicates,
        rm_weights=config.rm_weights,
        row_labels=row_labels,
        column_labels=column_labels,
        verbose=config.verbose,
    )

    progress("Estimating bipartite rank...")
    result = solve(
        graph.matrix,
        normalizer=config.normalizer,
        alpha=config.alpha,
        beta=config.beta,
        max_iter=config.max_iter,
        tol=config.tol,
        return_mode=config.return_mode,
        verbose=config.verbose,
    )
    return graph, result


def _format_mode(scores, labels, id_name, return_data_frame, attrs):
    if return_data_frame:
        formatted = pd.DataFrame({id_name: labels, RANK_COLUMN: scores})
    else:
        formatted = pd.Series(scores, index=pd.Index(labels, name=id_name), name=RANK_COLUMN)
    formatted.attrs.update(attrs)
    return formatted


def format_ranks(graph: BipartiteMatrix, result: RankResult, return_data_frame: bool = True):
    """
    Attach node labels to a :class:`RankResult`.

    Parameters:
    -----------
    graph : BipartiteMatrix
        Matrix the result was computed from; supplies labels in index order
    result : RankResult
        Solver output
    return_data_frame : bool
        Two-column (label, rank) DataFrame if True, rank Series indexed by
        label otherwise

    Returns:
    --------
    DataFrame/Series for one mode, or {"rows": ..., "columns": ...} for both
    """
    if graph.source_kind == EDGELIST:
        row_id = MATRIX_ID_NAME if graph.rows.name is None else graph.rows.name
        col_id = MATRIX_ID_NAME if graph.columns.name is None else graph.columns.name
    else:
        row_id = col_id = MATRIX_ID_NAME

    attrs = {
        "normalizer": result.normalizer,
        "converged": result.converged,
        "iterations": result.iterations,
        "delta": result.delta,
    }

    formatted = {}
    if result.rows is not None:
        formatted["rows"] = _format_mode(
            result.rows, graph.rows.take(result.row_index), row_id, return_data_frame, attrs
        )
    if result.columns is not None:
        formatted["columns"] = _format_mode(
            result.columns, graph.columns.take(result.column_index), col_id, return_data_frame, attrs
        )

    if len(formatted) == 1:
        return next(iter(formatted.values()))
    return formatted


def bipartite_rank(
    data: Any,
    sender_name: Any = None,
    receiver_name: Any = None,
    weight_name: Any = None,
    rm_weights: bool = False,
    duplicates: str = "add",
    normalizer: str = "HITS",
    return_mode: str = "rows",
    return_data_frame: bool = True,
    alpha: float = 0.85,
    beta: float = 0.85,
    max_iter: int = 200,
    tol: float = 1.0e-4,
    verbose: bool = False,
    row_labels: Optional[Any] = None,
    column_labels: Optional[Any] = None,
):
    """
    Estimate bipartite ranks (centrality scores) from an edge list or matrix.

    Edge lists are ranked in order of the unique values of each mode; matrix
    input uses ``row_labels`` / ``column_labels`` when given and positions
    ``1..n`` otherwise. Isolates are not returned. Convergence information is
    kept in the ``attrs`` of each returned frame, and a
    :class:`~bipartite_rank.errors.NonConvergenceWarning` is issued when the
    iteration budget runs out.

    Parameters:
    -----------
    data : pandas.DataFrame, list of records, numpy array, scipy sparse matrix or networkx graph
        Bipartite graph data
    sender_name, receiver_name, weight_name : column labels, optional
        Edge list columns; ignored for matrix input
    rm_weights : bool
        Treat every edge as weight 1
    duplicates : str
        "add" sums duplicate edges, "remove" keeps the first one
    normalizer : str
        HITS, CoHITS, BGRM or BiRank
    return_mode : str
        "rows", "columns" or "both"
    return_data_frame : bool
        DataFrame of (label, rank) if True, Series of ranks if False
    alpha, beta : float
        Damping factors of the first and second mode
    max_iter : int
        Maximum number of iterations
    tol : float
        Convergence tolerance
    verbose : bool
        Report progress at INFO level

    Returns:
    --------
    DataFrame or Series, or a dict with "rows" and "columns" for return_mode="both"
    """
    config = RankConfig(
        sender_name=sender_name,
        receiver_name=receiver_name,
        weight_name=weight_name,
        rm_weights=rm_weights,
        duplicates=duplicates,
        normalizer=normalizer,
        return_mode=return_mode,
        return_data_frame=return_data_frame,
        alpha=alpha,
        beta=beta,
        max_iter=max_iter,
        tol=tol,
        verbose=verbose,
    )
    graph, result = estimate_ranks(
        data, config=config, row_labels=row_labels, column_labels=column_labels
    )
    return format_ranks(graph, result, return_data_frame=config.return_data_frame)


def _fixed_normalizer(name):
    def rank(data, **kwargs):
        if "normalizer" in kwargs:
            raise TypeError(f"br_{name.lower()}() does not accept a normalizer argument")
        return bipartite_rank(data, normalizer=name, **kwargs)

    rank.__name__ = f"br_{name.lower()}"
    rank.__doc__ = f"Estimate {name} ranks; see :func:`bipartite_rank` for the options."
    return rank


br_hits = _fixed_normalizer("HITS")
br_cohits = _fixed_normalizer("CoHITS")
br_bgrm = _fixed_normalizer("BGRM")
br_birank = _fixed_normalizer("BiRank")

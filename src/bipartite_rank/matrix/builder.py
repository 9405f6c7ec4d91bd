"""Conversion of edge lists and matrices into a canonical sparse bipartite matrix."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import logging
from typing import Any, Optional

import networkx as nx
import numpy as np
import pandas as pd
import scipy.sparse

from bipartite_rank.analysis.degrees import column_degrees, row_degrees
from bipartite_rank.config import UNWEIGHTED
from bipartite_rank.errors import InvalidInputType, InvalidWeight, UnresolvableColumn
from bipartite_rank.labels import NodeIndex
from bipartite_rank.logging_utils import progress_logger

logger = logging.getLogger(__name__)

EDGELIST = "edgelist"
MATRIX = "matrix"


@dataclass
class BipartiteMatrix:
    """Weighted bipartite adjacency matrix ``W`` with its row and column labels."""

    matrix: scipy.sparse.csr_matrix
    rows: NodeIndex
    columns: NodeIndex
    source_kind: str = MATRIX

    @property
    def shape(self) -> tuple[int, int]:
        return self.matrix.shape

    @property
    def nnz(self) -> int:
        return self.matrix.nnz

    def row_degrees(self) -> np.ndarray:
        return row_degrees(self.matrix)

    def column_degrees(self) -> np.ndarray:
        return column_degrees(self.matrix)


def _empty_matrix(n_rows: int = 0, n_cols: int = 0) -> scipy.sparse.csr_matrix:
    return scipy.sparse.csr_matrix((n_rows, n_cols), dtype=np.float64)


def _canonicalize(matrix: Any) -> scipy.sparse.csr_matrix:
    """CSR float64 copy with summed duplicates, checked weights and no explicit zeros."""
    matrix = scipy.sparse.csr_matrix(matrix, dtype=np.float64, copy=True)
    matrix.sum_duplicates()
    if matrix.nnz:
        if not np.all(np.isfinite(matrix.data)):
            raise InvalidWeight(
                "Edge weights must be finite",
                context={"non_finite": int(np.sum(~np.isfinite(matrix.data)))},
            )
        if np.any(matrix.data < 0):
            raise InvalidWeight(
                "Edge weights must be non-negative",
                context={"negative": int(np.sum(matrix.data < 0))},
            )
    matrix.eliminate_zeros()
    matrix.sort_indices()
    return matrix


def _unsupported_record_type(source: Any) -> Optional[str]:
    for record in source:
        if isinstance(record, (str, bytes)) or not isinstance(record, (Mapping, Sequence, np.ndarray)):
            return type(record).__name__
    return None


def _as_edge_frame(source: Any) -> pd.DataFrame:
    if isinstance(source, pd.DataFrame):
        return source
    kind = type(source).__name__
    if isinstance(source, Mapping):
        try:
            return pd.DataFrame(dict(source))
        except (TypeError, ValueError) as exc:
            raise InvalidInputType(
                f"Cannot read edge list columns from {kind}: {exc}",
                context={"type": kind},
            ) from exc
    if isinstance(source, (list, tuple)):
        if len(source) == 0:
            return pd.DataFrame()
        record_type = _unsupported_record_type(source)
        if record_type is not None:
            raise InvalidInputType(
                f"Edge list records must be sequences or mappings, got {record_type}",
                context={"type": kind, "record": record_type},
            )
        try:
            return pd.DataFrame.from_records(list(source))
        except (TypeError, ValueError) as exc:
            raise InvalidInputType(
                f"Cannot read edge list records from {kind}: {exc}",
                context={"type": kind},
            ) from exc
    raise InvalidInputType(
        f"Unsupported edge list type: {kind}",
        context={"type": kind},
    )


def _resolve_column(frame: pd.DataFrame, name: Any, position: int, role: str) -> Any:
    if name is None:
        if frame.shape[1] <= position:
            raise InvalidInputType(
                f"Edge list needs at least two columns, found {frame.shape[1]}",
                context={"columns": list(frame.columns)},
            )
        return frame.columns[position]
    if name not in frame.columns:
        raise UnresolvableColumn(
            f"{role} column {name!r} not found in edge list",
            user_message=f"Column {name!r} does not exist; available columns: {list(frame.columns)}",
            context={"role": role, "column": name},
        )
    return name


def _edge_weights(frame: pd.DataFrame, weight_name: Any) -> np.ndarray:
    series = frame[weight_name]
    if pd.api.types.is_bool_dtype(series):
        raise InvalidWeight(f"Weight column {weight_name!r} is boolean, expected numbers")
    try:
        weights = pd.to_numeric(series, errors="raise").to_numpy(dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidWeight(
            f"Weight column {weight_name!r} is not numeric",
            context={"column": weight_name},
        ) from exc
    missing = ~np.isfinite(weights)
    if missing.any():
        raise InvalidWeight(
            f"Weight column {weight_name!r} has {int(missing.sum())} missing or non-finite value(s)",
            context={"column": weight_name, "first_row": int(np.flatnonzero(missing)[0])},
        )
    if np.any(weights < 0):
        raise InvalidWeight(
            f"Weight column {weight_name!r} has negative values",
            context={"column": weight_name},
        )
    return weights


def sparsematrix_from_edgelist(
    data: Any,
    sender_name: Any = None,
    receiver_name: Any = None,
    weight_name: Any = None,
    duplicates: str = "add",
) -> BipartiteMatrix:
    """
    Build ``W`` from an edge list.

    Parameters:
    -----------
    data : pandas.DataFrame, list of records or dict of columns
        One edge per row
    sender_name, receiver_name : column labels, optional
        Default to the first and second column
    weight_name : column label, optional
        None or "unweighted" gives every edge weight 1
    duplicates : str
        "add" sums parallel edges, anything else keeps the first one

    Returns:
    --------
    BipartiteMatrix : Rows and columns indexed in order of first occurrence
    """
    frame = _as_edge_frame(data)
    if frame.shape[1] == 0 and len(frame) == 0:
        return BipartiteMatrix(
            _empty_matrix(),
            NodeIndex([], name=sender_name),
            NodeIndex([], name=receiver_name),
            source_kind=EDGELIST,
        )

    sender = _resolve_column(frame, sender_name, 0, "sender")
    receiver = _resolve_column(frame, receiver_name, 1, "receiver")
    if isinstance(weight_name, str) and weight_name == UNWEIGHTED:
        weight_name = None
    if weight_name is not None:
        weight_name = _resolve_column(frame, weight_name, 2, "weight")

    row_codes, row_labels = pd.factorize(frame[sender], sort=False, use_na_sentinel=False)
    col_codes, col_labels = pd.factorize(frame[receiver], sort=False, use_na_sentinel=False)

    if weight_name is None:
        weights = np.ones(len(frame), dtype=np.float64)
    else:
        weights = _edge_weights(frame, weight_name)

    if duplicates != "add":
        pairs = pd.DataFrame({"row": row_codes, "col": col_codes})
        keep = ~pairs.duplicated(keep="first").to_numpy()
        row_codes, col_codes, weights = row_codes[keep], col_codes[keep], weights[keep]

    shape = (len(row_labels), len(col_labels))
    # coo -> csr sums any remaining parallel edges
    matrix = scipy.sparse.coo_matrix((weights, (row_codes, col_codes)), shape=shape)

    return BipartiteMatrix(
        _canonicalize(matrix),
        NodeIndex(row_labels, name=sender),
        NodeIndex(col_labels, name=receiver),
        source_kind=EDGELIST,
    )


def _matrix_labels(labels: Optional[Any], size: int, axis: str) -> NodeIndex:
    if labels is None:
        return NodeIndex.positional(size)
    labels = list(labels)
    if len(labels) != size:
        raise InvalidInputType(
            f"{axis} labels have length {len(labels)}, matrix has {size} {axis}s",
            context={"axis": axis, "labels": len(labels), "size": size},
        )
    return NodeIndex(labels)


def _check_numeric(dtype: np.dtype, kind: str) -> None:
    if not (np.issubdtype(dtype, np.number) or np.issubdtype(dtype, np.bool_)):
        raise InvalidInputType(
            f"{kind} has non-numeric dtype {dtype}",
            context={"dtype": str(dtype)},
        )
    if np.issubdtype(dtype, np.complexfloating):
        raise InvalidInputType(f"{kind} has complex dtype {dtype}", context={"dtype": str(dtype)})


def sparsematrix_from_matrix(
    data: Any,
    row_labels: Optional[Any] = None,
    column_labels: Optional[Any] = None,
) -> BipartiteMatrix:
    """Build ``W`` from a dense array or a scipy sparse matrix (rows = senders)."""
    if scipy.sparse.issparse(data):
        _check_numeric(data.dtype, "Sparse matrix")
        if len(data.shape) != 2:
            raise InvalidInputType(f"Sparse input must be 2-D, got shape {data.shape}")
        matrix = _canonicalize(data)
    elif isinstance(data, np.ndarray):
        if data.ndim != 2:
            raise InvalidInputType(
                f"Matrix input must be 2-D, got {data.ndim}-D array of shape {data.shape}",
                context={"shape": data.shape},
            )
        _check_numeric(data.dtype, "Matrix")
        matrix = _canonicalize(np.asarray(data, dtype=np.float64))
    else:
        raise InvalidInputType(
            f"Unsupported matrix type: {type(data).__name__}",
            context={"type": type(data).__name__},
        )

    n_rows, n_cols = matrix.shape
    return BipartiteMatrix(
        matrix,
        _matrix_labels(row_labels, n_rows, "row"),
        _matrix_labels(column_labels, n_cols, "column"),
        source_kind=MATRIX,
    )


def sparsematrix_from_graph(graph: nx.Graph, weight: str = "weight") -> BipartiteMatrix:
    """Build ``W`` from a networkx graph whose nodes carry ``bipartite`` 0 or 1."""
    if graph.number_of_nodes() == 0:
        return BipartiteMatrix(_empty_matrix(), NodeIndex([]), NodeIndex([]), source_kind=MATRIX)

    row_nodes = [n for n, d in graph.nodes(data=True) if d.get("bipartite") == 0]
    col_nodes = [n for n, d in graph.nodes(data=True) if d.get("bipartite") == 1]
    if len(row_nodes) + len(col_nodes) != graph.number_of_nodes():
        raise InvalidInputType(
            "Graph nodes must all carry a 'bipartite' attribute of 0 or 1",
            context={"nodes": graph.number_of_nodes(), "tagged": len(row_nodes) + len(col_nodes)},
        )

    if row_nodes and col_nodes:
        matrix = nx.bipartite.biadjacency_matrix(
            graph, row_order=row_nodes, column_order=col_nodes, weight=weight, format="csr"
        )
    else:
        matrix = _empty_matrix(len(row_nodes), len(col_nodes))

    return BipartiteMatrix(
        _canonicalize(matrix),
        NodeIndex(row_nodes),
        NodeIndex(col_nodes),
        source_kind=MATRIX,
    )


def sparsematrix_rm_weights(matrix: scipy.sparse.spmatrix) -> scipy.sparse.csr_matrix:
    """Replace every stored weight with 1.0."""
    unweighted = scipy.sparse.csr_matrix(matrix, dtype=np.float64, copy=True)
    unweighted.eliminate_zeros()
    unweighted.data[:] = 1.0
    return unweighted


def is_edgelist(source: Any) -> bool:
    return isinstance(source, (pd.DataFrame, Mapping, list, tuple))


def build(
    source: Any,
    sender_name: Any = None,
    receiver_name: Any = None,
    weight_name: Any = None,
    duplicates: str = "add",
    rm_weights: bool = False,
    row_labels: Optional[Any] = None,
    column_labels: Optional[Any] = None,
    verbose: bool = False,
) -> BipartiteMatrix:
    """
    Convert raw graph data into a canonical :class:`BipartiteMatrix`.

    Edge lists (DataFrames, lists of records, dicts of columns) use the
    column selectors and the duplicate policy; matrices (numpy, scipy.sparse)
    and bipartite networkx graphs ignore them. ``rm_weights`` applies to both.

    Raises:
    -------
    InvalidInputType : source has an unsupported type or shape
    UnresolvableColumn : a designated column does not exist
    InvalidWeight : weights are non-numeric, non-finite or negative
    """
    progress = progress_logger(logger, verbose)

    if is_edgelist(source):
        progress("Converting to sparse matrix...")
        graph = sparsematrix_from_edgelist(
            source,
            sender_name=sender_name,
            receiver_name=receiver_name,
            weight_name=weight_name,
            duplicates=duplicates,
        )
    elif isinstance(source, nx.Graph):
        progress("Converting graph to sparse matrix...")
        graph = sparsematrix_from_graph(source)
    elif isinstance(source, np.ndarray) or scipy.sparse.issparse(source):
        graph = sparsematrix_from_matrix(source, row_labels=row_labels, column_labels=column_labels)
    else:
        raise InvalidInputType(
            f"data is not a DataFrame, list of records, numpy array, scipy sparse matrix "
            f"or networkx graph: {type(source).__name__}",
            context={"type": type(source).__name__},
        )

    if rm_weights:
        progress("Removing edge weights...")
        graph.matrix = sparsematrix_rm_weights(graph.matrix)

    progress(
        "Built %d x %d bipartite matrix with %d edges", graph.shape[0], graph.shape[1], graph.nnz
    )
    return graph


__all__ = [
    "BipartiteMatrix",
    "EDGELIST",
    "MATRIX",
    "build",
    "is_edgelist",
    "sparsematrix_from_edgelist",
    "sparsematrix_from_graph",
    "sparsematrix_from_matrix",
    "sparsematrix_rm_weights",
]

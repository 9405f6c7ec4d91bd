import os
import logging
from scipy.io import mmread
import scipy.sparse
import scipy.io
import numpy as np
import pandas as pd
from typing import Optional, Dict, Any

from bipartite_rank.errors import InvalidInputType

logger = logging.getLogger(__name__)

MATRIX_EXTENSIONS = ['.npz', '.mtx', '.mat']
EDGELIST_EXTENSIONS = ['.csv', '.tsv', '.txt']


def generate_random_edge_list(n_senders: int = 10000, n_receivers: int = 5000,
                              n_edges: int = 10000, weighted: bool = False,
                              random_state: Optional[int] = None) -> pd.DataFrame:
    """
    Generate a random patient/provider style edge list.

    Parameters:
    -----------
    n_senders : int
        Number of distinct sender ids to sample from
    n_receivers : int
        Number of distinct receiver ids to sample from
    n_edges : int
        Number of edges (duplicates allowed)
    weighted : bool
        Add a 'weight' column of integer visit counts
    random_state : int, optional
        Random seed for reproducibility

    Returns:
    --------
    pandas.DataFrame : Columns 'patient_id', 'provider_id' (and 'weight')
    """
    rng = np.random.default_rng(random_state)
    edges = pd.DataFrame({
        'patient_id': rng.integers(1, n_senders + 1, size=n_edges),
        'provider_id': rng.integers(1, n_receivers + 1, size=n_edges),
    })
    if weighted:
        edges['weight'] = rng.integers(1, 10, size=n_edges)
    return edges


def load_edge_list(path: str, sep: Optional[str] = None) -> pd.DataFrame:
    """
    Load an edge list from a delimited text file.

    Parameters:
    -----------
    path : str
        File path; '.tsv' files default to tab separated
    sep : str, optional
        Column separator, inferred from the extension when omitted

    Returns:
    --------
    pandas.DataFrame : One edge per row
    """
    if sep is None:
        sep = '\t' if path.endswith('.tsv') else ','
    return pd.read_csv(path, sep=sep)


def load_matrix(path: str) -> scipy.sparse.csr_matrix:
    """
    Load a bipartite adjacency matrix from file.

    Parameters:
    -----------
    path : str
        '.mtx' (Matrix Market), '.npz' (scipy sparse), '.mat' (MATLAB) or
        a headerless dense '.csv'/'.tsv' file

    Returns:
    --------
    scipy.sparse.csr_matrix : Loaded matrix
    """
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    ext = os.path.splitext(path)[1].lower()
    if ext == '.mtx':
        return scipy.sparse.csr_matrix(mmread(path))
    elif ext == '.npz':
        return scipy.sparse.csr_matrix(scipy.sparse.load_npz(path))
    elif ext == '.mat':
        data = scipy.io.loadmat(path)
        # First sparse or 2-D array variable in the file
        for key, value in data.items():
            if not key.startswith('__') and scipy.sparse.issparse(value):
                return value.tocsr()
            elif not key.startswith('__') and isinstance(value, np.ndarray) and value.ndim == 2:
                return scipy.sparse.csr_matrix(value)
        raise InvalidInputType(f"No matrix variable found in {path}", context={"path": path})
    elif ext in ('.csv', '.tsv', '.txt'):
        # Dense matrix, no header
        sep = '\t' if ext == '.tsv' else ','
        dense = pd.read_csv(path, sep=sep, header=None).to_numpy(dtype=np.float64)
        return scipy.sparse.csr_matrix(dense)

    raise InvalidInputType(
        f"Unsupported matrix file extension: {ext or '(none)'}",
        context={"path": path, "supported": MATRIX_EXTENSIONS},
    )


def load_graph_data(path: str, kind: str = 'auto'):
    """Load an edge list or a matrix depending on ``kind`` or the file extension."""
    if kind == 'auto':
        ext = os.path.splitext(path)[1].lower()
        kind = 'matrix' if ext in MATRIX_EXTENSIONS else 'edgelist'
    if kind == 'matrix':
        logger.debug("Loading matrix from %s", path)
        return load_matrix(path)
    if kind == 'edgelist':
        logger.debug("Loading edge list from %s", path)
        return load_edge_list(path)
    raise ValueError(f"Unknown input kind: {kind}")


def save_matrix(matrix: scipy.sparse.spmatrix, filepath: str):
    """
    Save a sparse matrix to file.

    Parameters:
    -----------
    matrix : scipy.sparse matrix
        Matrix to save
    filepath : str
        Output file path
    """
    ext = os.path.splitext(filepath)[1].lower()

    if ext == '.npz':
        scipy.sparse.save_npz(filepath, scipy.sparse.csr_matrix(matrix))
    elif ext == '.mtx':
        scipy.io.mmwrite(filepath, matrix)
    else:
        # Default to .npz
        scipy.sparse.save_npz(filepath + '.npz', scipy.sparse.csr_matrix(matrix))


def save_ranks(ranks, filepath: str) -> Dict[str, Any]:
    """
    Write rank tables to CSV.

    A single DataFrame/Series goes to ``filepath``; a {"rows", "columns"}
    dict goes to ``<stem>_rows.csv`` and ``<stem>_columns.csv``.

    Returns:
    --------
    dict : Mode name -> written path
    """
    if isinstance(ranks, dict):
        stem, ext = os.path.splitext(filepath)
        ext = ext or '.csv'
        written = {}
        for mode, table in ranks.items():
            path = f"{stem}_{mode}{ext}"
            _write_table(table, path)
            written[mode] = path
        return written

    _write_table(ranks, filepath)
    return {'ranks': filepath}


def _write_table(table, path):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    if isinstance(table, pd.Series):
        table = table.reset_index()
    table.to_csv(path, index=False)

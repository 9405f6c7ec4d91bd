import numpy as np
import scipy.sparse


def row_degrees(matrix):
    """Generalized (weighted) degree of every row, ``K_d``."""
    return np.asarray(matrix.sum(axis=1), dtype=np.float64).ravel()


def column_degrees(matrix):
    """Generalized (weighted) degree of every column, ``K_p``."""
    return np.asarray(matrix.sum(axis=0), dtype=np.float64).ravel()


def inverse_degrees(degrees, power=1.0):
    """
    Element-wise ``degrees ** -power`` with isolates mapped to 0.

    Parameters:
    -----------
    degrees : numpy.ndarray
        Generalized degree vector
    power : float
        1.0 for ``K^-1``, 0.5 for ``K^-1/2``

    Returns:
    --------
    numpy.ndarray : Inverse degrees, 0 wherever the degree is 0
    """
    degrees = np.asarray(degrees, dtype=np.float64)
    inverse = np.zeros_like(degrees)
    nonzero = degrees > 0
    inverse[nonzero] = degrees[nonzero] ** -power
    return inverse


def inverse_degree_matrix(degrees, power=1.0):
    """Diagonal sparse matrix of :func:`inverse_degrees`."""
    inverse = inverse_degrees(degrees, power=power)
    return scipy.sparse.diags(inverse, 0, shape=(len(inverse), len(inverse)), format='csr')


def non_isolates(degrees):
    """Indices of nodes with positive degree, in index order."""
    return np.flatnonzero(np.asarray(degrees) > 0)


def compute_matrix_properties(matrix):
    """
    Summarize a bipartite adjacency matrix.

    Parameters:
    -----------
    matrix : scipy.sparse matrix
        Weighted bipartite adjacency matrix W

    Returns:
    --------
    dict : Dictionary of matrix properties
    """
    if not scipy.sparse.issparse(matrix):
        matrix = scipy.sparse.csr_matrix(matrix)
    matrix = matrix.tocsr()
    rows, cols = matrix.shape
    nnz = matrix.nnz

    k_d = row_degrees(matrix)
    k_p = column_degrees(matrix)

    properties = {
        'shape': (rows, cols),
        'nnz': nnz,
        'density': (nnz / (rows * cols)) * 100 if rows * cols > 0 else 0,
        'total_weight': float(k_d.sum()),
        'is_binary': bool(nnz == 0 or np.all(matrix.data == 1.0)),
        'isolated_rows': int(np.sum(k_d == 0)),
        'isolated_cols': int(np.sum(k_p == 0)),
        'format': matrix.format
    }

    # Degree statistics over the non-isolated nodes
    if nnz > 0:
        row_nnz = np.diff(matrix.indptr)
        col_nnz = np.diff(matrix.tocsc().indptr)
        properties.update({
            'avg_row_degree': float(np.mean(k_d[k_d > 0])),
            'max_row_degree': float(np.max(k_d)),
            'avg_col_degree': float(np.mean(k_p[k_p > 0])),
            'max_col_degree': float(np.max(k_p)),
            'avg_nnz_per_row': float(np.mean(row_nnz)),
            'max_nnz_per_row': int(np.max(row_nnz)),
            'avg_nnz_per_col': float(np.mean(col_nnz)),
            'max_nnz_per_col': int(np.max(col_nnz)),
        })
    else:
        # Empty matrix
        properties.update({
            'avg_row_degree': 0.0,
            'max_row_degree': 0.0,
            'avg_col_degree': 0.0,
            'max_col_degree': 0.0,
            'avg_nnz_per_row': 0.0,
            'max_nnz_per_row': 0,
            'avg_nnz_per_col': 0.0,
            'max_nnz_per_col': 0,
        })

    return properties

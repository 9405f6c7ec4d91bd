import networkx as nx
import numpy as np
import scipy.sparse


def build_bipartite_graph(A, row_labels=None, col_labels=None):
    m, n = A.shape
    G = nx.Graph()
    G.add_nodes_from(range(m), bipartite=0)       # Rows
    G.add_nodes_from(range(m, m+n), bipartite=1)  # Columns shifted

    if row_labels is not None:
        nx.set_node_attributes(G, {i: label for i, label in enumerate(row_labels)}, 'label')
    if col_labels is not None:
        nx.set_node_attributes(G, {m + j: label for j, label in enumerate(col_labels)}, 'label')

    A_coo = scipy.sparse.coo_matrix(A)
    for i, j, w in zip(A_coo.row, A_coo.col, A_coo.data):
        G.add_edge(int(i), m + int(j), weight=float(w))  # shift column index to avoid overlap
    return G


def _drop_diagonal(P):
    P = P.tolil()
    P.setdiag(0)
    P = P.tocsr()
    P.eliminate_zeros()
    return P


def project_rows(A, binary=False):
    """
    One-mode projection onto the rows: ``A @ A.T`` without self loops.

    Parameters:
    -----------
    A : scipy.sparse matrix
        Bipartite adjacency matrix (rows x columns)
    binary : bool
        Count shared columns instead of summing weight products

    Returns:
    --------
    scipy.sparse.csr_matrix : Symmetric rows x rows matrix
    """
    A = scipy.sparse.csr_matrix(A, dtype=np.float64)
    if binary:
        A = A.copy()
        A.data[:] = 1.0
    return _drop_diagonal(A @ A.T)


def project_columns(A, binary=False):
    """One-mode projection onto the columns: ``A.T @ A`` without self loops."""
    return project_rows(scipy.sparse.csr_matrix(A).T, binary=binary)

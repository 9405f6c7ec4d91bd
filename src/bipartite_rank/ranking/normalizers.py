"""Transition matrices for the bipartite rank normalizers.

Each normalizer turns the weighted adjacency matrix ``W`` and its degree
vectors ``K_d`` (rows) and ``K_p`` (columns) into

* ``S_d`` (n_rows x n_cols), which propagates column scores onto rows, and
* ``S_p`` (n_cols x n_rows), which propagates row scores onto columns.

Both follow one rule: ``S_d = K_d^-left W K_p^-right`` and
``S_p = K_p^-left Wᵗ K_d^-right``. Inverse degrees of isolated nodes are 0,
so isolates receive no mass.
"""

import numpy as np
import scipy.sparse

from bipartite_rank.analysis.degrees import column_degrees, inverse_degree_matrix, row_degrees
from bipartite_rank.config import canonical_normalizer


class Normalizer:
    """Base strategy; subclasses only set the degree powers."""

    name = None
    # Degree power on the receiving (left) and sending (right) side; None skips it.
    left_power = None
    right_power = None
    # Unnormalized transitions do not preserve mass, so iterates are rescaled.
    rescale = False

    def _scale(self, matrix, left_degrees, right_degrees):
        if self.left_power is not None:
            matrix = inverse_degree_matrix(left_degrees, self.left_power) @ matrix
        if self.right_power is not None:
            matrix = matrix @ inverse_degree_matrix(right_degrees, self.right_power)
        matrix = scipy.sparse.csr_matrix(matrix)
        matrix.eliminate_zeros()
        return matrix

    def transitions(self, matrix, k_d=None, k_p=None):
        """
        Build the two directional transition operators.

        Parameters:
        -----------
        matrix : scipy.sparse matrix
            Weighted bipartite adjacency matrix W
        k_d, k_p : numpy.ndarray, optional
            Row and column degrees; computed from W when omitted

        Returns:
        --------
        tuple : (S_d, S_p) as CSR matrices
        """
        matrix = scipy.sparse.csr_matrix(matrix, dtype=np.float64, copy=True)
        if k_d is None:
            k_d = row_degrees(matrix)
        if k_p is None:
            k_p = column_degrees(matrix)

        s_d = self._scale(matrix, k_d, k_p)
        s_p = self._scale(matrix.T.tocsr(), k_p, k_d)
        return s_d, s_p

    def __repr__(self):
        return f"{type(self).__name__}()"


class HITS(Normalizer):
    """``S_d = W``, ``S_p = Wᵗ``."""

    name = 'HITS'
    rescale = True


class CoHITS(Normalizer):
    """``S_d = K_d⁻¹ W``, ``S_p = K_p⁻¹ Wᵗ``."""

    name = 'CoHITS'
    left_power = 1.0


class BGRM(Normalizer):
    """``S_d = K_d⁻¹ W K_p⁻¹``, ``S_p = K_p⁻¹ Wᵗ K_d⁻¹``."""

    name = 'BGRM'
    left_power = 1.0
    right_power = 1.0


class BiRank(Normalizer):
    """``S_d = K_d^-1/2 W K_p^-1/2``, ``S_p = K_p^-1/2 Wᵗ K_d^-1/2``.

    Symmetric normalization from He et al. (2017), "BiRank: Towards ranking
    on bipartite graphs", IEEE TKDE 29(1).
    """

    name = 'BiRank'
    left_power = 0.5
    right_power = 0.5


_NORMALIZERS = {cls.name: cls for cls in (HITS, CoHITS, BGRM, BiRank)}


def get_normalizer(normalizer):
    """Look up a normalizer by (case-insensitive) name, or pass an instance through."""
    if isinstance(normalizer, Normalizer):
        return normalizer
    return _NORMALIZERS[canonical_normalizer(normalizer)]()


def available_normalizers():
    return list(_NORMALIZERS)

import unittest
import numpy as np
import scipy.sparse
import networkx as nx

# Import modules to test
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bipartite_rank.analysis.degrees import (
    compute_matrix_properties, inverse_degrees, non_isolates
)
from bipartite_rank.analysis.graph_struct import (
    build_bipartite_graph, project_columns, project_rows
)
from bipartite_rank.errors import ConfigError
from bipartite_rank.matrix.builder import sparsematrix_from_graph
from bipartite_rank.ranking.pagerank import pagerank


class TestDegrees(unittest.TestCase):
    """Test cases for degree helpers and matrix summaries."""

    def test_inverse_degrees(self):
        np.testing.assert_allclose(inverse_degrees([4.0, 0.0, 2.0]), [0.25, 0.0, 0.5])
        np.testing.assert_allclose(inverse_degrees([4.0, 0.0], power=0.5), [0.5, 0.0])

    def test_non_isolates(self):
        np.testing.assert_array_equal(non_isolates([0.0, 1.5, 0.0, 2.0]), [1, 3])

    def test_matrix_properties(self):
        W = scipy.sparse.csr_matrix(np.array([
            [2.0, 0.0, 1.0],
            [0.0, 0.0, 0.0],
        ]))
        props = compute_matrix_properties(W)

        self.assertEqual(props['shape'], (2, 3))
        self.assertEqual(props['nnz'], 2)
        self.assertEqual(props['total_weight'], 3.0)
        self.assertFalse(props['is_binary'])
        self.assertEqual(props['isolated_rows'], 1)
        self.assertEqual(props['isolated_cols'], 1)
        self.assertEqual(props['max_row_degree'], 3.0)
        self.assertEqual(props['avg_col_degree'], 1.5)

    def test_empty_matrix_properties(self):
        props = compute_matrix_properties(scipy.sparse.csr_matrix((0, 0)))
        self.assertEqual(props['nnz'], 0)
        self.assertEqual(props['density'], 0)
        self.assertTrue(props['is_binary'])


class TestProjections(unittest.TestCase):
    """Test cases for one-mode projections and graph export."""

    def setUp(self):
        self.W = scipy.sparse.csr_matrix(np.array([
            [2.0, 3.0],
            [1.0, 0.0],
            [0.0, 4.0],
        ]))

    def test_project_rows(self):
        P = project_rows(self.W)
        expected = np.array([
            [0, 2, 12],
            [2, 0, 0],
            [12, 0, 0],
        ], dtype=float)
        np.testing.assert_array_equal(P.toarray(), expected)

    def test_project_rows_binary(self):
        P = project_rows(self.W, binary=True)
        expected = np.array([
            [0, 1, 1],
            [1, 0, 0],
            [1, 0, 0],
        ], dtype=float)
        np.testing.assert_array_equal(P.toarray(), expected)

    def test_project_columns(self):
        P = project_columns(self.W)
        np.testing.assert_array_equal(P.toarray(), [[0, 6], [6, 0]])
        self.assertEqual(P.diagonal().sum(), 0)

    def test_package_exports(self):
        import bipartite_rank
        for name in ['project_rows', 'project_columns', 'build_bipartite_graph']:
            with self.subTest(name=name):
                self.assertIn(name, bipartite_rank.__all__)
        np.testing.assert_array_equal(bipartite_rank.project_rows(self.W).toarray(),
                                      project_rows(self.W).toarray())

    def test_bipartite_graph_export(self):
        G = build_bipartite_graph(self.W, row_labels=['a', 'b', 'c'], col_labels=['x', 'y'])

        self.assertEqual(G.number_of_nodes(), 5)
        self.assertEqual(G.number_of_edges(), 4)
        self.assertTrue(nx.is_bipartite(G))
        self.assertEqual(G.nodes[3]['label'], 'x')
        self.assertEqual(G[0][4]['weight'], 3.0)

        # Exported graphs load back into the same matrix
        graph = sparsematrix_from_graph(G)
        np.testing.assert_array_equal(graph.matrix.toarray(), self.W.toarray())


class TestPageRank(unittest.TestCase):
    """Test cases for one-mode PageRank."""

    def test_symmetric_cycle_is_uniform(self):
        A = nx.to_scipy_sparse_array(nx.cycle_graph(3))
        result = pagerank(A, tol=1e-10)
        self.assertTrue(result.converged)
        np.testing.assert_allclose(result.rows, [1 / 3] * 3)

    def test_path_centre_ranks_highest(self):
        A = np.array([[0, 1, 0], [1, 0, 1], [0, 1, 0]])
        result = pagerank(A)
        self.assertEqual(int(np.argmax(result.rows)), 1)
        self.assertAlmostEqual(result.rows.sum(), 1.0)

    def test_dangling_nodes_keep_mass(self):
        A = np.array([[0.0, 1.0], [0.0, 0.0]])
        result = pagerank(A, tol=1e-10)
        self.assertAlmostEqual(result.rows.sum(), 1.0)
        self.assertGreater(result.rows[1], result.rows[0])

    def test_isolates(self):
        A = np.array([[0, 1, 0], [1, 0, 0], [0, 0, 0]])
        result = pagerank(A)
        np.testing.assert_array_equal(result.row_index, [0, 1])
        self.assertAlmostEqual(result.rows.sum(), 1.0)
        np.testing.assert_allclose(result.rows, [0.5, 0.5])

        kept = pagerank(A, keep_isolates=True)
        np.testing.assert_array_equal(kept.row_index, [0, 1, 2])
        self.assertAlmostEqual(kept.rows.sum(), 1.0)

    def test_projection_pipeline(self):
        P = project_rows(scipy.sparse.csr_matrix(np.array([
            [1.0, 1.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 1.0],
            [0.0, 0.0, 1.0],
        ])))
        result = pagerank(P)
        self.assertTrue(result.converged)
        self.assertEqual(len(result.rows), 4)

    def test_rejects_non_square(self):
        with self.assertRaises(ConfigError):
            pagerank(np.ones((2, 3)))


if __name__ == '__main__':
    unittest.main()

import unittest
import numpy as np
import pandas as pd
import scipy.sparse
import networkx as nx

# Import modules to test
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bipartite_rank.errors import InvalidInputType, InvalidWeight, UnresolvableColumn
from bipartite_rank.matrix.builder import (
    EDGELIST, MATRIX, build, sparsematrix_from_edgelist, sparsematrix_from_graph,
    sparsematrix_from_matrix, sparsematrix_rm_weights
)


class TestEdgeListBuilder(unittest.TestCase):
    """Test cases for building W from edge lists."""

    def setUp(self):
        self.edges = pd.DataFrame({
            'patient': ['X', 'Y', 'X', 'Z'],
            'provider': ['a', 'b', 'c', 'a'],
            'visits': [1.0, 2.0, 3.0, 4.0],
        })

    def test_first_occurrence_order(self):
        """Rows and columns are indexed in order of first appearance."""
        graph = build(self.edges)

        self.assertEqual(graph.source_kind, EDGELIST)
        self.assertEqual(list(graph.rows.labels), ['X', 'Y', 'Z'])
        self.assertEqual(list(graph.columns.labels), ['a', 'b', 'c'])
        self.assertEqual(graph.shape, (3, 3))
        self.assertEqual(graph.rows.name, 'patient')
        self.assertEqual(graph.columns.name, 'provider')

    def test_implicit_unit_weights(self):
        graph = build(self.edges)
        expected = np.array([
            [1, 0, 1],
            [0, 1, 0],
            [1, 0, 0],
        ], dtype=float)
        np.testing.assert_array_equal(graph.matrix.toarray(), expected)

    def test_weight_column(self):
        graph = build(self.edges, weight_name='visits')
        expected = np.array([
            [1, 0, 3],
            [0, 2, 0],
            [4, 0, 0],
        ], dtype=float)
        np.testing.assert_array_equal(graph.matrix.toarray(), expected)

    def test_unweighted_sentinel(self):
        """weight_name='unweighted' behaves like no weight column."""
        plain = build(self.edges)
        sentinel = build(self.edges, weight_name='unweighted')
        np.testing.assert_array_equal(plain.matrix.toarray(), sentinel.matrix.toarray())

    def test_named_columns_resolved_independently(self):
        swapped = build(self.edges, sender_name='provider', receiver_name='patient')
        self.assertEqual(list(swapped.rows.labels), ['a', 'b', 'c'])
        self.assertEqual(list(swapped.columns.labels), ['X', 'Y', 'Z'])

        only_receiver = build(self.edges, receiver_name='visits')
        self.assertEqual(list(only_receiver.rows.labels), ['X', 'Y', 'Z'])
        self.assertEqual(only_receiver.columns.name, 'visits')

    def test_duplicates_add(self):
        edges = pd.DataFrame({'s': ['A', 'A'], 'r': ['B', 'B'], 'w': [2.0, 3.0]})
        graph = build(edges, weight_name='w', duplicates='add')
        single = build(pd.DataFrame({'s': ['A'], 'r': ['B'], 'w': [5.0]}), weight_name='w')

        np.testing.assert_array_equal(graph.matrix.toarray(), single.matrix.toarray())
        self.assertEqual(graph.nnz, 1)

    def test_duplicates_remove_keeps_first(self):
        edges = pd.DataFrame({'s': ['A', 'A'], 'r': ['B', 'B'], 'w': [2.0, 3.0]})
        for policy in ['remove', 'first', 'anything']:
            with self.subTest(policy=policy):
                graph = build(edges, weight_name='w', duplicates=policy)
                np.testing.assert_array_equal(graph.matrix.toarray(), [[2.0]])

    def test_independent_index_spaces(self):
        """A sender '5' and a receiver '5' are different nodes."""
        graph = build([('5', '5'), ('5', '6'), ('7', '5')])
        self.assertEqual(graph.shape, (2, 2))
        self.assertEqual(list(graph.rows.labels), ['5', '7'])
        self.assertEqual(list(graph.columns.labels), ['5', '6'])

    def test_list_of_records(self):
        records = [
            {'u': 'u1', 'v': 'v1', 'w': 1},
            {'u': 'u1', 'v': 'v2', 'w': 2},
            {'u': 'u2', 'v': 'v1', 'w': 3},
        ]
        graph = build(records, weight_name='w')
        np.testing.assert_array_equal(graph.matrix.toarray(), [[1, 2], [3, 0]])

        tuples = build([('u1', 'v1', 4), ('u2', 'v2', 5)], weight_name=2)
        np.testing.assert_array_equal(tuples.matrix.toarray(), [[4, 0], [0, 5]])

    def test_dict_of_columns(self):
        graph = build({'from': [1, 2, 1], 'to': [10, 10, 20]})
        self.assertEqual(list(graph.rows.labels), [1, 2])
        self.assertEqual(list(graph.columns.labels), [10, 20])

    def test_empty_edge_list(self):
        for source in [[], pd.DataFrame({'s': [], 'r': []})]:
            with self.subTest(source=type(source).__name__):
                graph = build(source)
                self.assertEqual(graph.shape, (0, 0))
                self.assertEqual(graph.nnz, 0)

    def test_zero_weight_edges_are_absent(self):
        graph = build(pd.DataFrame({'s': ['a', 'b'], 'r': ['x', 'x'], 'w': [0.0, 1.0]}),
                      weight_name='w')
        self.assertEqual(graph.shape, (2, 1))
        self.assertEqual(graph.nnz, 1)
        np.testing.assert_array_equal(graph.row_degrees(), [0.0, 1.0])

    def test_canonical_format(self):
        graph = build(self.edges)
        self.assertTrue(scipy.sparse.isspmatrix_csr(graph.matrix))
        self.assertTrue(graph.matrix.has_canonical_format)
        self.assertEqual(graph.matrix.dtype, np.float64)


class TestEdgeListErrors(unittest.TestCase):
    """Test cases for rejected edge lists."""

    def setUp(self):
        self.edges = pd.DataFrame({'s': ['a', 'b'], 'r': ['x', 'y'], 'w': [1.0, 2.0]})

    def test_missing_columns(self):
        for kwargs in [{'sender_name': 'nope'}, {'receiver_name': 'nope'}, {'weight_name': 'nope'}]:
            with self.subTest(**kwargs):
                with self.assertRaises(UnresolvableColumn) as ctx:
                    build(self.edges, **kwargs)
                self.assertEqual(ctx.exception.context['column'], 'nope')

    def test_single_column(self):
        with self.assertRaises(InvalidInputType):
            build(pd.DataFrame({'s': ['a', 'b']}))

    def test_invalid_weights(self):
        cases = {
            'missing': [1.0, np.nan],
            'infinite': [1.0, np.inf],
            'negative': [1.0, -2.0],
            'text': ['1', 'heavy'],
            'boolean': [True, False],
        }
        for name, weights in cases.items():
            with self.subTest(case=name):
                edges = self.edges.assign(w=weights)
                with self.assertRaises(InvalidWeight):
                    build(edges, weight_name='w')

    def test_unsupported_types(self):
        for source in ['edges.csv', 42, {1, 2}, None]:
            with self.subTest(source=source):
                with self.assertRaises(InvalidInputType):
                    build(source)

    def test_malformed_column_mappings(self):
        cases = {
            'scalar values': {'s': 'a', 'r': 'b'},
            'ragged columns': {'s': ['a', 'b'], 'r': ['x']},
        }
        for name, source in cases.items():
            with self.subTest(case=name):
                with self.assertRaises(InvalidInputType) as ctx:
                    build(source)
                self.assertEqual(ctx.exception.context['type'], 'dict')

    def test_malformed_records(self):
        cases = {
            'integers': [1, 2, 3],
            'strings': ['ab', 'cd'],
            'bytes': [b'ab', b'cd'],
            'mixed': [('a', 'x'), None],
        }
        for name, source in cases.items():
            with self.subTest(case=name):
                with self.assertRaises(InvalidInputType):
                    build(source)

    def test_direct_edge_list_function_rejects_arrays(self):
        with self.assertRaises(InvalidInputType):
            sparsematrix_from_edgelist(np.ones((2, 2)))


class TestMatrixBuilder(unittest.TestCase):
    """Test cases for building W from matrices and graphs."""

    def test_dense_matrix_positional_labels(self):
        graph = build(np.array([[0, 1], [1, 0]]))

        self.assertEqual(graph.source_kind, MATRIX)
        self.assertEqual(list(graph.rows.labels), [1, 2])
        self.assertEqual(list(graph.columns.labels), [1, 2])
        np.testing.assert_array_equal(graph.matrix.toarray(), [[0, 1], [1, 0]])

    def test_rectangular_labels(self):
        matrix = np.array([[1, 0, 2], [0, 3, 0]])
        graph = sparsematrix_from_matrix(matrix, row_labels=['r1', 'r2'],
                                         column_labels=['c1', 'c2', 'c3'])
        self.assertEqual(graph.rows.index('r2'), 1)
        self.assertEqual(graph.columns.label(2), 'c3')

        default = sparsematrix_from_matrix(matrix)
        self.assertEqual(list(default.rows.labels), [1, 2])
        self.assertEqual(list(default.columns.labels), [1, 2, 3])

    def test_label_length_mismatch(self):
        with self.assertRaises(InvalidInputType):
            build(np.eye(2), row_labels=['only one'])

    def test_sparse_input_sums_duplicates(self):
        coo = scipy.sparse.coo_matrix(([1.0, 2.0, 4.0], ([0, 0, 1], [1, 1, 0])), shape=(2, 2))
        graph = build(coo)
        np.testing.assert_array_equal(graph.matrix.toarray(), [[0, 3], [4, 0]])
        self.assertTrue(graph.matrix.has_canonical_format)

    def test_sparse_array_input(self):
        array = scipy.sparse.csr_array(np.array([[0.0, 2.0], [1.0, 0.0]]))
        graph = build(array)
        np.testing.assert_array_equal(graph.matrix.toarray(), [[0, 2], [1, 0]])

    def test_bad_matrices(self):
        for source in [np.ones(3), np.ones((2, 2, 2)), np.array([['a', 'b'], ['c', 'd']])]:
            with self.subTest(shape=source.shape, dtype=str(source.dtype)):
                with self.assertRaises(InvalidInputType):
                    build(source)

    def test_negative_matrix_weights(self):
        with self.assertRaises(InvalidWeight):
            build(np.array([[1.0, -1.0]]))

    def test_matrix_ignores_edge_list_options(self):
        graph = build(np.eye(2), sender_name='whatever', duplicates='remove')
        self.assertEqual(graph.shape, (2, 2))

    def test_networkx_graph(self):
        G = nx.Graph()
        G.add_nodes_from(['p1', 'p2'], bipartite=0)
        G.add_nodes_from(['d1', 'd2', 'd3'], bipartite=1)
        G.add_edge('p1', 'd1', weight=2.0)
        G.add_edge('p2', 'd3')

        graph = sparsematrix_from_graph(G)
        self.assertEqual(list(graph.rows.labels), ['p1', 'p2'])
        self.assertEqual(list(graph.columns.labels), ['d1', 'd2', 'd3'])
        np.testing.assert_array_equal(graph.matrix.toarray(), [[2, 0, 0], [0, 0, 1]])

    def test_networkx_graph_requires_bipartite_attribute(self):
        G = nx.path_graph(3)
        with self.assertRaises(InvalidInputType):
            build(G)


class TestRemoveWeights(unittest.TestCase):
    """Test cases for weight stripping."""

    def test_rm_weights(self):
        matrix = scipy.sparse.csr_matrix(np.array([[2.5, 0], [0, 7.0]]))
        stripped = sparsematrix_rm_weights(matrix)

        np.testing.assert_array_equal(stripped.toarray(), [[1, 0], [0, 1]])
        # Input is left untouched
        self.assertEqual(matrix[0, 0], 2.5)

    def test_rm_weights_idempotent(self):
        matrix = scipy.sparse.random(20, 15, density=0.2, format='csr', random_state=0)
        once = sparsematrix_rm_weights(matrix)
        twice = sparsematrix_rm_weights(once)
        self.assertEqual((once != twice).nnz, 0)

    def test_build_rm_weights_applies_to_both_kinds(self):
        edges = pd.DataFrame({'s': ['a', 'a'], 'r': ['x', 'x'], 'w': [2.0, 3.0]})
        from_edges = build(edges, weight_name='w', rm_weights=True)
        np.testing.assert_array_equal(from_edges.matrix.toarray(), [[1.0]])

        from_matrix = build(np.array([[0.0, 4.0], [9.0, 0.0]]), rm_weights=True)
        np.testing.assert_array_equal(from_matrix.matrix.toarray(), [[0, 1], [1, 0]])


if __name__ == '__main__':
    unittest.main()

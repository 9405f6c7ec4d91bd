"""Bipartite rank centrality: HITS, CoHITS, BGRM and BiRank on sparse matrices."""

from bipartite_rank.analysis.graph_struct import build_bipartite_graph, project_columns, project_rows
from bipartite_rank.config import RankConfig
from bipartite_rank.errors import (
    BipartiteRankError,
    ConfigError,
    InvalidInputType,
    InvalidWeight,
    NonConvergence,
    NonConvergenceWarning,
    UnresolvableColumn,
)
from bipartite_rank.matrix.builder import BipartiteMatrix, build, sparsematrix_rm_weights
from bipartite_rank.ranking.bipartite import (
    bipartite_rank,
    br_bgrm,
    br_birank,
    br_cohits,
    br_hits,
    estimate_ranks,
    format_ranks,
)
from bipartite_rank.ranking.pagerank import pagerank
from bipartite_rank.ranking.solver import RankResult, RankStatus, solve

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BipartiteMatrix",
    "BipartiteRankError",
    "ConfigError",
    "InvalidInputType",
    "InvalidWeight",
    "NonConvergence",
    "NonConvergenceWarning",
    "RankConfig",
    "RankResult",
    "RankStatus",
    "UnresolvableColumn",
    "bipartite_rank",
    "br_bgrm",
    "br_birank",
    "br_cohits",
    "br_hits",
    "build_bipartite_graph",
    "build",
    "estimate_ranks",
    "format_ranks",
    "pagerank",
    "project_columns",
    "project_rows",
    "solve",
    "sparsematrix_rm_weights",
]

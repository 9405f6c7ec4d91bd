"""
bipartite-rank - command line interface

Usage:
    bipartite-rank demo
    bipartite-rank analyze <path>
    bipartite-rank rank <path> --normalizer BiRank --return-mode both --output ranks.csv
"""

import argparse
import logging
import sys

import pandas as pd

from bipartite_rank.analysis.degrees import compute_matrix_properties
from bipartite_rank.config import NORMALIZERS, RETURN_MODES, RankConfig
from bipartite_rank.logging_utils import configure_logging, log_exception
from bipartite_rank.matrix.builder import build
from bipartite_rank.ranking.bipartite import estimate_ranks, format_ranks
from bipartite_rank.utils.loader import generate_random_edge_list, load_graph_data, save_ranks

logger = logging.getLogger("bipartite_rank.cli")


def _print_table(ranks, top):
    tables = ranks if isinstance(ranks, dict) else {'ranks': ranks}
    for mode, table in tables.items():
        if isinstance(table, pd.Series):
            table = table.reset_index()
        print(f"\n{mode} (top {min(top, len(table))} of {len(table)}):")
        print(table.sort_values('rank', ascending=False).head(top).to_string(index=False))


def cmd_demo(args):
    """Rank a random patient/provider edge list with every normalizer."""
    print("=== bipartite-rank demo ===")
    edges = generate_random_edge_list(n_senders=500, n_receivers=100, n_edges=2000,
                                      random_state=args.seed)
    graph = build(edges)
    print(f"Edge list: {len(edges)} edges -> {graph.shape[0]}x{graph.shape[1]} matrix, "
          f"{graph.nnz} distinct edges")

    print(f"\n{'Normalizer':<10} {'Iterations':<11} {'Converged':<10} {'Top provider'}")
    print("-" * 50)
    for normalizer in NORMALIZERS:
        config = RankConfig(normalizer=normalizer, return_mode='columns',
                            return_data_frame=False)
        graph, result = estimate_ranks(edges, config=config)
        ranks = format_ranks(graph, result, return_data_frame=False)
        print(f"{normalizer:<10} {result.iterations:<11} {str(result.converged):<10} "
              f"{ranks.idxmax()}")


def cmd_analyze(args):
    """Print properties of the bipartite matrix built from a file."""
    data = load_graph_data(args.path, kind=args.input_kind)
    graph = build(data, sender_name=args.sender, receiver_name=args.receiver,
                  weight_name=args.weight, duplicates=args.duplicates)
    props = compute_matrix_properties(graph.matrix)

    print(f"Analyzing: {args.path}")
    print(f"  Shape: {props['shape'][0]} rows x {props['shape'][1]} columns")
    print(f"  Edges: {props['nnz']:,}")
    print(f"  Density: {props['density']:.6f}%")
    print(f"  Total weight: {props['total_weight']:,.2f}")
    print(f"  Binary: {props['is_binary']}")
    print(f"  Isolated rows/columns: {props['isolated_rows']}/{props['isolated_cols']}")
    print(f"  Avg row degree: {props['avg_row_degree']:.2f} (max {props['max_row_degree']:.2f})")
    print(f"  Avg column degree: {props['avg_col_degree']:.2f} (max {props['max_col_degree']:.2f})")

    if args.plot:
        from bipartite_rank.visualization.plots import (
            plot_sparsity_pattern, save_plot, use_headless_backend
        )
        use_headless_backend()
        path = save_plot(plot_sparsity_pattern(graph.matrix), 'sparsity.png', output_dir=args.plot)
        print(f"Saved sparsity pattern to {path}")


def cmd_rank(args):
    """Estimate ranks for an edge list or matrix file."""
    data = load_graph_data(args.path, kind=args.input_kind)
    config = RankConfig(
        sender_name=args.sender,
        receiver_name=args.receiver,
        weight_name=args.weight,
        rm_weights=args.rm_weights,
        duplicates=args.duplicates,
        normalizer=args.normalizer,
        return_mode=args.return_mode,
        alpha=args.alpha,
        beta=args.beta,
        max_iter=args.max_iter,
        tol=args.tol,
        verbose=args.verbose,
    )
    graph, result = estimate_ranks(data, config=config)
    ranks = format_ranks(graph, result)

    status = "converged" if result.converged else "did NOT converge"
    print(f"{result.normalizer} {status} after {result.iterations} iteration(s), "
          f"delta {result.delta:.3e}")

    if args.output:
        written = save_ranks(ranks, args.output)
        for mode, path in written.items():
            print(f"Wrote {mode} to {path}")
    else:
        _print_table(ranks, args.top)

    if args.plot:
        from bipartite_rank.visualization.plots import (
            plot_convergence, plot_rank_distribution, save_plot, use_headless_backend
        )
        use_headless_backend()
        path = save_plot(plot_convergence(result), 'convergence.png', output_dir=args.plot)
        print(f"Saved convergence plot to {path}")
        tables = ranks if isinstance(ranks, dict) else {config.return_mode: ranks}
        for mode, table in tables.items():
            path = save_plot(plot_rank_distribution(table, title=f"{mode} ranks"),
                             f'ranks_{mode}.png', output_dir=args.plot)
            print(f"Saved rank distribution to {path}")

    return 0 if result.converged else 2


def _add_graph_options(parser):
    parser.add_argument('path', help='Edge list (.csv/.tsv) or matrix (.mtx/.npz/.mat) file')
    parser.add_argument('--input-kind', choices=['auto', 'edgelist', 'matrix'], default='auto')
    parser.add_argument('--sender', help='Sender column (default: first column)')
    parser.add_argument('--receiver', help='Receiver column (default: second column)')
    parser.add_argument('--weight', help='Weight column (default: unweighted)')
    parser.add_argument('--duplicates', choices=['add', 'remove'], default='add')


def build_parser():
    parser = argparse.ArgumentParser(
        prog='bipartite-rank',
        description='Bipartite rank centrality (HITS, CoHITS, BGRM, BiRank)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bipartite-rank demo
  bipartite-rank analyze edges.csv --sender patient_id --receiver provider_id
  bipartite-rank rank edges.csv --normalizer BiRank --return-mode both --output out/ranks.csv
        """
    )
    parser.add_argument('--debug', action='store_true', help='Show tracebacks on errors')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Demo command
    demo_parser = subparsers.add_parser('demo', help='Rank a random edge list')
    demo_parser.add_argument('--seed', type=int, default=42)

    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Summarize a bipartite graph')
    _add_graph_options(analyze_parser)
    analyze_parser.add_argument('--plot', metavar='DIR', help='Save the sparsity pattern to DIR')

    # Rank command
    rank_parser = subparsers.add_parser('rank', help='Estimate bipartite ranks')
    _add_graph_options(rank_parser)
    rank_parser.add_argument('--rm-weights', action='store_true', help='Ignore edge weights')
    rank_parser.add_argument('--normalizer', choices=NORMALIZERS, default='HITS')
    rank_parser.add_argument('--return-mode', choices=RETURN_MODES, default='rows')
    rank_parser.add_argument('--alpha', type=float, default=0.85)
    rank_parser.add_argument('--beta', type=float, default=0.85)
    rank_parser.add_argument('--max-iter', type=int, default=200)
    rank_parser.add_argument('--tol', type=float, default=1.0e-4)
    rank_parser.add_argument('--output', help='CSV path for the rank table(s)')
    rank_parser.add_argument('--top', type=int, default=10, help='Rows to print without --output')
    rank_parser.add_argument('--plot', metavar='DIR', help='Save a convergence plot to DIR')
    rank_parser.add_argument('--verbose', action='store_true', help='Report progress')

    return parser


def main(argv=None):
    """Main CLI interface."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    verbose = getattr(args, 'verbose', False)
    configure_logging(logging.DEBUG if args.debug else (logging.INFO if verbose else logging.WARNING))

    commands = {'demo': cmd_demo, 'analyze': cmd_analyze, 'rank': cmd_rank}
    try:
        return commands[args.command](args) or 0
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 130
    except Exception as exc:
        log_exception(logger, exc, show_traceback=args.debug)
        return 1


if __name__ == "__main__":
    sys.exit(main())

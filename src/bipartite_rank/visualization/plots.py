import os

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
import scipy.sparse


def plot_sparsity_pattern(matrix, title="Bipartite Adjacency", ax=None, figsize=(8, 8)):
    """
    Plot the sparsity pattern of a bipartite adjacency matrix.

    Parameters:
    -----------
    matrix : scipy.sparse matrix
        Weighted bipartite adjacency matrix
    title : str
        Plot title
    ax : matplotlib.axes, optional
        Axes to plot on
    figsize : tuple
        Figure size

    Returns:
    --------
    matplotlib.figure or None
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return_fig = True
    else:
        return_fig = False

    if not scipy.sparse.issparse(matrix):
        matrix = scipy.sparse.csr_matrix(matrix)

    ax.spy(matrix, markersize=1, alpha=0.8)
    ax.set_title(f"{title}\n{matrix.shape[0]}x{matrix.shape[1]}, {matrix.nnz} edges")
    ax.set_xlabel("Receiver (column) index")
    ax.set_ylabel("Sender (row) index")

    if return_fig:
        return fig
    return None


def plot_convergence(results, title="Convergence", ax=None, figsize=(10, 6)):
    """
    Plot the per-iteration L1 delta of one or more rank estimates.

    Parameters:
    -----------
    results : RankResult or dict
        A single result or {name: RankResult}
    title : str
        Plot title
    ax : matplotlib.axes, optional
        Axes to plot on
    figsize : tuple
        Figure size

    Returns:
    --------
    matplotlib.figure or None
    """
    if not isinstance(results, dict):
        results = {results.normalizer: results}

    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
        return_fig = True
    else:
        return_fig = False

    has_lines = False
    for name, result in results.items():
        if not result.history:
            continue
        iterations = np.arange(1, len(result.history) + 1)
        label = name if result.converged else f"{name} (not converged)"
        ax.semilogy(iterations, result.history, marker='o', markersize=3, label=label)
        has_lines = True

    ax.set_xlabel('Iteration')
    ax.set_ylabel('L1 delta')
    ax.set_title(title)
    if has_lines:
        ax.legend()
    ax.grid(True, alpha=0.3)

    if return_fig:
        return fig
    return None


def plot_rank_distribution(ranks, title="Rank Distribution", bins=50, figsize=(12, 5)):
    """
    Histogram and sorted profile of rank scores.

    Parameters:
    -----------
    ranks : pandas.DataFrame, pandas.Series or numpy.ndarray
        Scores; DataFrames use their 'rank' column
    title : str
        Plot title
    bins : int
        Histogram bins

    Returns:
    --------
    matplotlib.figure
    """
    if hasattr(ranks, 'columns'):
        scores = ranks['rank'].to_numpy()
    else:
        scores = np.asarray(ranks)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    ax1.hist(scores, bins=bins, alpha=0.7, edgecolor='black')
    ax1.set_xlabel('Rank score')
    ax1.set_ylabel('Number of nodes')
    ax1.set_title(f'{title}\n{len(scores)} nodes')

    ax2.plot(np.sort(scores)[::-1], linewidth=1.5)
    ax2.set_xlabel('Node (sorted by score)')
    ax2.set_ylabel('Rank score')
    ax2.set_yscale('log' if len(scores) and np.all(scores > 0) else 'linear')
    ax2.set_title('Sorted scores')
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def save_plot(fig, filename, output_dir='results', dpi=300):
    """
    Save plot to file.

    Parameters:
    -----------
    fig : matplotlib.figure
        Figure to save
    filename : str
        Filename (without path)
    output_dir : str
        Output directory
    dpi : int
        Resolution

    Returns:
    --------
    str : Path to saved file
    """
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, filename)
    fig.savefig(filepath, dpi=dpi, bbox_inches='tight')
    plt.close(fig)
    return filepath


def use_headless_backend():
    """Switch to the non-interactive Agg backend (CLI and tests)."""
    matplotlib.use('Agg')

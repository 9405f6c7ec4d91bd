#!/usr/bin/env python3
"""
Simple Demo - Shows basic usage of bipartite-rank

This is a minimal example showing how to:
1. Generate a patient/provider edge list
2. Rank providers with BiRank
3. Compare against the other normalizers
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bipartite_rank import bipartite_rank, br_birank
from bipartite_rank.utils.loader import generate_random_edge_list


def simple_example():
    """Rank a small random referral network."""
    # Generate test edge list (duplicates are summed into weights)
    edges = generate_random_edge_list(n_senders=200, n_receivers=30, n_edges=800,
                                      random_state=0)

    # Provider ranks with the symmetric BiRank normalizer
    providers = br_birank(edges, return_mode='columns')
    print("Top providers (BiRank):")
    print(providers.sort_values('rank', ascending=False).head(5).to_string(index=False))

    # Same question, other normalizers
    for normalizer in ['HITS', 'CoHITS', 'BGRM']:
        ranks = bipartite_rank(edges, normalizer=normalizer, return_mode='columns')
        best = ranks.loc[ranks['rank'].idxmax(), 'provider_id']
        status = "converged" if ranks.attrs['converged'] else "not converged"
        print(f"{normalizer:<7} top provider: {best} ({status}, "
              f"{ranks.attrs['iterations']} iterations)")


if __name__ == "__main__":
    simple_example()

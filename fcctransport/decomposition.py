"""Assignment of spatial domains to ranks."""

from __future__ import annotations

import random
from typing import MutableSequence


def _fisher_yates(items: MutableSequence[int], rng: random.Random) -> None:
    count = len(items)
    for ii in range(count - 1):
        jj = int(rng.random() * (count - ii)) + ii
        items[ii], items[jj] = items[jj], items[ii]


class DecompositionObject:
    """Maps every global domain id to an owning rank and a rank-local index.

    Mode 0 assigns consecutive blocks of domains to each rank.  Mode 1 is a
    debugging mode that shuffles domains among ranks and indices; it is
    quadratic in the number of ranks.  The default random stream is fixed so
    that every rank computes the same decomposition.
    """

    def __init__(
        self,
        my_rank: int,
        n_ranks: int,
        n_domains_per_rank: int,
        mode: int,
        rng: random.Random | None = None,
    ) -> None:
        if mode not in (0, 1):
            raise ValueError(f"decomposition mode must be 0 or 1, not {mode}")
        if not 0 <= my_rank < n_ranks:
            raise ValueError(f"rank {my_rank} outside 0..{n_ranks - 1}")
        if n_domains_per_rank < 1:
            raise ValueError("each rank needs at least one domain")

        n_domains = n_ranks * n_domains_per_rank
        if mode == 0:
            self._rank = [gid // n_domains_per_rank for gid in range(n_domains)]
            self._index = [gid % n_domains_per_rank for gid in range(n_domains)]
            first = my_rank * n_domains_per_rank
            self._assigned = [
                n_domains_per_rank * self._rank[gid] + self._index[gid]
                for gid in range(first, first + n_domains_per_rank)
            ]
        else:
            if n_ranks >= 1000:
                raise ValueError("mode 1 supports fewer than 1000 ranks")
            rng = rng if rng is not None else random.Random(0)
            self._rank = [gid // n_domains_per_rank for gid in range(n_domains)]
            _fisher_yates(self._rank, rng)
            self._index = [0] * n_domains
            self._assigned = []
            for rank in range(n_ranks):
                local = [gid for gid, owner in enumerate(self._rank) if owner == rank]
                _fisher_yates(local, rng)
                for position, gid in enumerate(local):
                    self._index[gid] = position
                if rank == my_rank:
                    self._assigned = local

    @property
    def assigned_gids(self) -> list[int]:
        """Global ids of the domains owned by this rank, in local index order."""
        return list(self._assigned)

    def rank_of(self, domain_gid: int) -> int:
        """Rank that owns the given domain."""
        return self._rank[domain_gid]

    def index_of(self, domain_gid: int) -> int:
        """Index of the given domain within its owning rank."""
        return self._index[domain_gid]
"""Position of a particle in the mesh: domain, cell and facet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, TypeVar

T = TypeVar("T")


@dataclass
class Location:
    """A (domain, cell, facet) triple; -1 marks an unset field."""

    domain: int = -1
    cell: int = -1
    facet: int = -1

    def get_domain(self, domains: Sequence[T]) -> T:
        """The domain this location refers to."""
        if self.domain < 0:
            raise IndexError(f"location has no valid domain: {self.domain}")
        return domains[self.domain]
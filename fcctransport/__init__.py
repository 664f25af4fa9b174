"""Building blocks for Monte Carlo particle transport on a face-centred cubic tetrahedral mesh."""

__version__ = "0.1.0"
"""Console rendering for the relay CLI."""

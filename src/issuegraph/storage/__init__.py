"""Issue store backends."""

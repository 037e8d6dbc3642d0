"""Storage and identity adapters - implementations of the repository ports."""

"""Content path resolution: parsing, traversal, classification, responses."""

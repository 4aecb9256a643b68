"""Service layer: the endpoint catalogue and its payload shapes."""

"""Domain layer: value objects and error types shared by every other layer."""

"""Domain layer: entities and repository interfaces."""

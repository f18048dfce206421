"""Infrastructure layer: persistence and filesystem adapters."""

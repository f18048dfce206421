"""Application layer: services, DTOs and the service container."""

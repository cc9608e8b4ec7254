"""Infrastructure layer: adapters for external collaborators and providers."""

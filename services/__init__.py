"""Business logic used by the API blueprints."""

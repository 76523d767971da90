"""HTTP layer: Flask blueprints and request helpers for the Auth0 services."""

"""Configuration module for the Auth0 user management service."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]

"""
Application Configuration

Environment-driven settings loaded into ``app.config`` by ``create_app``.
"""

import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Config:
    """Base configuration class."""

    # Firestore settings
    GCP_PROJECT = os.environ.get("GCP_PROJECT")
    RECIPES_COLLECTION = os.environ.get("RECIPES_COLLECTION", "recipes")
    RECIPE_TITLES_COLLECTION = os.environ.get("RECIPE_TITLES_COLLECTION", "recipe_titles")

    # Static files are served from the URL root
    PUBLIC_FOLDER = os.environ.get("PUBLIC_FOLDER", os.path.join(BASE_DIR, "public"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    MAX_CONTENT_LENGTH = 16 * 1024 * 1024


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True


__all__ = ["Config", "TestingConfig"]

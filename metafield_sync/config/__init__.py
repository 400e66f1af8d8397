"""Configuration loading (environment + YAML run policy)."""

"""Configuration: settings, config discovery, and logging setup."""

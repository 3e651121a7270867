"""Configuration: feature flags."""

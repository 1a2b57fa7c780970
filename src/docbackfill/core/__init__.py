"""Configuration and process setup."""

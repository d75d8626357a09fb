"""Shared utilities: configuration, logging, errors."""

"""Adapters – framework bindings for the inspector ports."""

"""Canopy core: rules engine, documents, configuration, errors."""

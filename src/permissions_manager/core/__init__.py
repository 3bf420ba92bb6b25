"""Core infrastructure: database, errors, caching, logging, and policies."""

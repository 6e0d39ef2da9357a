"""Service layer for the site research backend."""

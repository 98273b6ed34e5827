"""Small shared helpers: persistence, caching, logging and validation."""

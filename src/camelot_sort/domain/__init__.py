"""Domain layer - harmony, library, enrichment and playlist ordering."""

"""L1 Intelligence Layer - Repository security signal collection."""

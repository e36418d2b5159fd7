"""PDF Drive: PDF sharing service."""

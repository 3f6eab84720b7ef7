"""Command-line interface for SalonBook."""

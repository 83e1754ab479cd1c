"""Command-line client for the transactional mail API."""

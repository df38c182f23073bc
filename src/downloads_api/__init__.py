"""Serve the latest generated download page for an email address."""

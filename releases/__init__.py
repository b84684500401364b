"""Release lookups against local tags and the GitHub REST API."""

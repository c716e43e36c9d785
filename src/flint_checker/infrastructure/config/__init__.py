"""Configuration infrastructure — policy filter files."""

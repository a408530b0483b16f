"""Client library for the campus administration API."""

"""Flask web front end."""

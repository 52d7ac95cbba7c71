"""Client-side entry points: CLI, file ingestion and the Flask API."""

"""HTTP API subpackage (FastAPI)."""

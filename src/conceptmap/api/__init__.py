"""HTTP API for building and rendering concept maps."""

"""Video metadata types and errors."""

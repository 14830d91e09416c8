"""Process-level infrastructure: logging and metrics."""

"""Core types, response schemas and validation."""

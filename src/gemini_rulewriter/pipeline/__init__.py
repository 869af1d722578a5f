"""Prompt-driven pipelines: retry driver, rewrite, append, refine and runner."""

"""Instruction file resolution and persistence."""

"""Prompt text for the intake pipeline."""

"""Household chore preference collection."""

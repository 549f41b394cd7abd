"""Helpers shared by models and commands."""

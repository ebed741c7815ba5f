"""CLI module for bridgeshell."""

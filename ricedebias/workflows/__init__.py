"""Command line workflows."""

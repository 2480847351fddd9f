"""Logging and multiprocessing helpers."""

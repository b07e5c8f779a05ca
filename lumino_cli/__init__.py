"""Command line helpers for inspecting the lumino event runtime."""

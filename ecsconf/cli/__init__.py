"""Command-line interface for ecsconf."""

"""Command line interface for the kotoba engine."""

"""Command line interface for DigitNet."""

"""Core of the CLI: configuration, domain models and services.

The core knows nothing about typer or rich; the CLI layer renders what the
services compute.
"""

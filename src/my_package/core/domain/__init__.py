"""Domain models of the CLI.

Pure data structures (Pydantic v2); no file access, no typer, no rich.
"""

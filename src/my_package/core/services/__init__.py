"""Services behind the CLI commands: repository checks, coverage gate,
pipeline report and matrix expansion."""

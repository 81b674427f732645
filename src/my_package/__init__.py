"""Python project template: packaging, linting, pre-commit and CI/CD glue.

The package ships the `cli-tool` console script, which validates the
repository configuration and renders the CI step summaries.
"""

__version__ = "0.1.1"

"""Allow `python -m my_package ...` (used by the CI workflow with PYTHONPATH=src)."""

from __future__ import annotations

from my_package.cli import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()

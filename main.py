"""Development entry point (no install needed).

Runs the CLI with:
- `python main.py ...`

The code lives in `src/` (src layout), so without an editable install Python
does not find `my_package`.
"""

from __future__ import annotations

from pathlib import Path
import sys

# Step summaries and tables contain emoji; Windows consoles default to cp1252.
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")
    sys.stderr.reconfigure(encoding="utf-8")


def main() -> None:
    project_root = Path(__file__).resolve().parent
    src = project_root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))

    from my_package.cli import run

    run()


if __name__ == "__main__":
    main()

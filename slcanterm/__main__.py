from __future__ import annotations

from slcanterm.apps.cli import main


if __name__ == "__main__":
    main()

"""``python -m twinpane [--dry-run] [--host HOST ...]``"""

from twinpane.app import main

if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

from gitupdater.commands import main

if __name__ == "__main__":
    raise SystemExit(main())

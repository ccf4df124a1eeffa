from __future__ import annotations

from postfix.cli import run

if __name__ == "__main__":
    run()

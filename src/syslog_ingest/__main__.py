"""Module entrypoint.

Allows:
    python -m syslog_ingest
"""

from __future__ import annotations

from syslog_ingest.cli import main

if __name__ == "__main__":
    main()

"""Entry point for cron: summarise unread Outlook mail once and exit.

Example weekly crontab line (Mondays 07:00):

    0 7 * * 1 /path/to/venv/bin/python /path/to/scripts/weekly_inbox_digest.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from inbox_digest.cli import run

if __name__ == "__main__":
    run()

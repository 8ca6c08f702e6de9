"""
Alloy Attachment Agent — Entry Point
====================================
Finds this machine's Computer record in Alloy Navigator (audit id first,
BIOS serial second) and attaches a local file to it.

Usage:
    python agent.py --file C:\\Reports\\inventory.xml --description "Nightly audit"

Exit codes are listed in alloy_core/constants.py.
"""

from alloy_core.runner import run

if __name__ == "__main__":
    run()

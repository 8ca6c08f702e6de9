"""
Local machine facts:
  - BIOS / hardware serial number (Windows, macOS, Linux)
  - Audit id written by the Alloy audit agent
"""

import sys
import subprocess
from pathlib import Path

from .config import log
from .constants import PLACEHOLDER_SERIALS

_DMI_SERIAL = Path("/sys/class/dmi/id/product_serial")


def _clean_serial(raw):
    """Strip and reject placeholder values. Returns str or None."""
    serial = (raw or "").strip()
    if serial.lower() in PLACEHOLDER_SERIALS:
        return None
    return serial


def _run(cmd):
    """Run a command, return stdout text or None on failure."""
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
    except (OSError, subprocess.SubprocessError) as e:
        log.debug("%s failed: %s", cmd[0], e)
        return None
    if result.returncode != 0:
        log.debug("%s exited %d: %s", cmd[0], result.returncode, result.stderr.strip())
        return None
    return result.stdout


# ─── Serial number ───────────────────────────────────────────────

def _windows_serial():
    out = _run([
        "powershell", "-NoProfile", "-NonInteractive", "-Command",
        "(Get-CimInstance -ClassName Win32_BIOS).SerialNumber",
    ])
    if out and out.strip():
        return out
    # Older systems without CIM cmdlets
    out = _run(["wmic", "bios", "get", "serialnumber"])
    if not out:
        return None
    lines = [l.strip() for l in out.splitlines() if l.strip()]
    # First line is the "SerialNumber" header
    return lines[1] if len(lines) > 1 else None


def _macos_serial():
    out = _run(["system_profiler", "SPHardwareDataType"])
    if not out:
        return None
    for line in out.splitlines():
        if "Serial Number" in line and ":" in line:
            return line.split(":", 1)[1]
    return None


def _linux_serial():
    try:
        return _DMI_SERIAL.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.debug("Cannot read %s: %s", _DMI_SERIAL, e)
        return None


def get_bios_serial(platform=None):
    """Hardware serial of this machine, or None if unknown."""
    platform = platform or sys.platform
    if platform == "win32":
        raw = _windows_serial()
    elif platform == "darwin":
        raw = _macos_serial()
    else:
        raw = _linux_serial()

    serial = _clean_serial(raw)
    if serial:
        log.info("BIOS serial: %s", serial)
    else:
        log.warning("BIOS serial not available (got %r)", raw)
    return serial


# ─── Audit id ────────────────────────────────────────────────────

def read_audit_id(path):
    """
    Audit id from the audit agent's file. Accepts a bare value or a
    KEY=value line. Returns None when the file is absent or empty.
    """
    if not path:
        return None
    path = Path(path)
    if not path.is_file():
        log.info("Audit id file not found: %s", path)
        return None

    try:
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        log.warning("Cannot read audit id file %s: %s", path, e)
        return None

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", ";", "[")):
            continue
        if "=" in line:
            line = line.split("=", 1)[1].strip()
        if line:
            log.info("Audit id: %s", line)
            return line
    return None

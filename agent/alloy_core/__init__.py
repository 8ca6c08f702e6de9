"""
alloy_core — Alloy Navigator attachment agent
=============================================
Architecture: single-threaded, blocking. One run = grant, resolve, upload.

  constants.py     → Version, retry delay, field names, exit codes
  config.py        → Paths, logging, config load/save, safe_print
  errors.py        → AlloyApiError hierarchy
  http_client.py   → Shared requests session + CA bundle
  state.py         → Credentials + Token (shared by reference)
  api.py           → invoke(): token-aware call with bounded retry
  search.py        → Filter / SearchParams + object search
  resolver.py      → Tiered computer lookup (audit id → serial)
  attachments.py   → Base64 attachment upload
  platform_info.py → BIOS serial + audit id file
  runner.py        → CLI main() + exit codes
"""

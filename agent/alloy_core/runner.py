"""
Entry point: parse arguments, resolve this machine's Computer record and
upload the file as an attachment. main() returns the process exit code.
"""

import argparse
import sys

from .constants import (
    AGENT_VERSION, COMPUTER_TYPES, DEFAULT_MAX_TRIES,
    EXIT_OK, EXIT_NO_RESPONSE_DATA, EXIT_API_FAILURE, EXIT_CALL_INTERRUPTED,
    EXIT_UPLOAD_FAILED, EXIT_UPLOAD_INTERRUPTED, EXIT_NOT_FOUND, EXIT_CONFIG_ERROR,
)
from .config import (
    log, safe_print, setup_logging, load_config, save_config,
    apply_env_overrides, parse_max_tries, parse_timeout, CONFIG_FILE, LOG_FILE,
)
from .errors import AlloyApiError, ApiLogicalError, ApiNoDataError, ConfigError
from .state import Credentials, Token
from .platform_info import get_bios_serial, read_audit_id
from .resolver import resolve_computer_id
from .attachments import upload_attachment


def build_parser():
    parser = argparse.ArgumentParser(
        prog="alloy-attach",
        description="Attach a file to this machine's Computer record in Alloy Navigator.",
    )
    parser.add_argument("--file", required=True, help="File to upload")
    parser.add_argument("--description", default="", help="Attachment description")
    parser.add_argument("--base-url", help="API root, e.g. https://alloy.example.com/api")
    parser.add_argument("--client-id")
    parser.add_argument("--client-secret")
    parser.add_argument("--max-tries", type=int,
                        help="Attempts per call; 0 or negative retries forever")
    parser.add_argument("--audit-id-file", help="File holding the audit id")
    parser.add_argument("--serial", help="Override the BIOS serial number")
    parser.add_argument("--config", default=str(CONFIG_FILE), help="Config JSON path")
    parser.add_argument("--log-file", default=str(LOG_FILE))
    parser.add_argument("--save-config", action="store_true",
                        help="Write the merged settings (without secrets) to --config")
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {AGENT_VERSION}")
    return parser


def build_settings(args, environ=None):
    """Config file, then ALLOY_* env vars, then command-line flags."""
    settings = {"maxTries": DEFAULT_MAX_TRIES, "computerTypes": list(COMPUTER_TYPES)}
    settings.update(load_config(args.config))
    settings = apply_env_overrides(settings, environ)

    cli = {
        "baseUrl": args.base_url,
        "clientId": args.client_id,
        "clientSecret": args.client_secret,
        "maxTries": args.max_tries,
        "auditIdFile": args.audit_id_file,
    }
    settings.update({k: v for k, v in cli.items() if v is not None})

    missing = [k for k in ("baseUrl", "clientId", "clientSecret") if not settings.get(k)]
    if missing:
        raise ConfigError(f"Missing setting(s): {', '.join(missing)}")

    settings["maxTries"] = parse_max_tries(settings.get("maxTries"))
    types = settings.get("computerTypes")
    if isinstance(types, str):
        types = [t.strip() for t in types.split(",") if t.strip()]
    if not isinstance(types, (list, tuple)) or not types:
        raise ConfigError(f"computerTypes must list at least one type, got {types!r}")
    if not all(isinstance(t, str) and t.strip() for t in types):
        raise ConfigError(f"computerTypes must hold type names, got {types!r}")
    settings["computerTypes"] = [t.strip() for t in types]
    settings["requestTimeoutSec"] = parse_timeout(settings.get("requestTimeoutSec"))
    return settings


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, verbose=args.verbose)
    log.info("Alloy Attachment Agent v%s", AGENT_VERSION)

    try:
        settings = build_settings(args)
    except ConfigError as e:
        log.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    if args.save_config:
        save_config(settings, args.config)

    base_url = settings["baseUrl"]
    max_tries = settings["maxTries"]
    timeout = settings.get("requestTimeoutSec")
    credentials = Credentials(settings["clientId"], settings["clientSecret"])
    token = Token()

    serial = args.serial or get_bios_serial()
    audit_id = read_audit_id(settings.get("auditIdFile"))

    # ── Resolve the Computer record ──
    try:
        object_id = resolve_computer_id(
            credentials, token, base_url, serial,
            audit_id=audit_id,
            computer_types=settings["computerTypes"],
            max_tries=max_tries,
            timeout=timeout,
        )
    except ApiNoDataError as e:
        log.error("Computer search returned no data: %s", e)
        return EXIT_NO_RESPONSE_DATA
    except ApiLogicalError as e:
        log.error("Computer search rejected by API: %s", e)
        return EXIT_API_FAILURE
    except AlloyApiError as e:
        log.error("Computer search interrupted: %s", e)
        return EXIT_CALL_INTERRUPTED

    if object_id is None:
        safe_print(f"No Computer record found for serial {serial}")
        return EXIT_NOT_FOUND

    # ── Upload ──
    try:
        result = upload_attachment(
            credentials, token, base_url, object_id, args.file,
            description=args.description,
            max_tries=max_tries,
            timeout=timeout,
        )
    except (AlloyApiError, OSError) as e:
        log.error("Upload of %s to object %s interrupted: %s", args.file, object_id, e)
        return EXIT_UPLOAD_INTERRUPTED

    if not result or not result.get("success"):
        result = result or {}
        log.error("Upload of %s to object %s failed: [%s] %s", args.file, object_id,
                  result.get("errorCode"), result.get("errorText"))
        return EXIT_UPLOAD_FAILED

    log.info("Uploaded %s to object %s", args.file, object_id)
    safe_print(f"Attachment uploaded to Computer {object_id}")
    return EXIT_OK


def run():
    sys.exit(main())

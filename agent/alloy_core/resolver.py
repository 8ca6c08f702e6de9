"""
Computer resolver — find the Alloy Computer record for this machine.

Tiers, most specific first; the first tier with a match wins:
  1. Audit_ID = local audit id            (skipped when no audit id)
  2. serial + type + status not inactive  (one OR-group per type)
  3. serial + type + status inactive      (one OR-group per type×status)

Every search sorts by ID descending, so the first row is the newest
matching record. No match in any tier → None.
"""

import copy

from .config import log
from .constants import (
    FIELD_ID, FIELD_AUDIT_ID, FIELD_SERIAL, FIELD_TYPE, FIELD_STATUS,
    OP_EQUAL, OP_NOT_EQUAL, SORT_DESC, COMPUTER_TYPES, INACTIVE_STATUSES,
)
from .errors import ApiLogicalError, ApiNoDataError
from .search import Filter, SearchParams, search_computers


# ─── Query builders ──────────────────────────────────────────────

def computer_search_template():
    """Base query: no filters, newest ID first, fetch the ID column only."""
    return SearchParams(
        sort=[{"field": FIELD_ID, "direction": SORT_DESC}],
        fields=[[FIELD_ID]],
    )


def audit_id_params(template, audit_id):
    params = template.copy()
    params.filters.append([Filter(FIELD_AUDIT_ID, audit_id, OP_EQUAL)])
    return params


def active_serial_params(template, serial, computer_types=COMPUTER_TYPES,
                         inactive_statuses=INACTIVE_STATUSES):
    """One group per type: serial AND type AND status <> each inactive status."""
    params = template.copy()
    base_group = [Filter(FIELD_SERIAL, serial, OP_EQUAL)]
    for computer_type in computer_types:
        group = copy.deepcopy(base_group)
        group.append(Filter(FIELD_TYPE, computer_type, OP_EQUAL))
        for status in inactive_statuses:
            group.append(Filter(FIELD_STATUS, status, OP_NOT_EQUAL))
        params.filters.append(group)
    return params


def inactive_serial_params(template, serial, computer_types=COMPUTER_TYPES,
                           inactive_statuses=INACTIVE_STATUSES):
    """One group per (type, status): serial AND type AND status = that status."""
    params = template.copy()
    base_group = [Filter(FIELD_SERIAL, serial, OP_EQUAL)]
    for computer_type in computer_types:
        for status in inactive_statuses:
            group = copy.deepcopy(base_group)
            group.append(Filter(FIELD_TYPE, computer_type, OP_EQUAL))
            group.append(Filter(FIELD_STATUS, status, OP_EQUAL))
            params.filters.append(group)
    return params


# ─── Result handling ─────────────────────────────────────────────

def first_record_id(result):
    """ID of the first row in responseObject.Data, or None when empty."""
    response_object = result.get("responseObject")
    if not isinstance(response_object, dict):
        return None
    data = response_object.get("Data")
    if not isinstance(data, list) or not data:
        return None
    row = data[0]
    if isinstance(row, dict):
        return row.get(FIELD_ID)
    if isinstance(row, (list, tuple)):
        return row[0] if row else None
    return row


def _match(label, result):
    if result is None:
        raise ApiNoDataError(f"Computer search by {label} returned no data")
    if not result.get("success"):
        raise ApiLogicalError(
            f"Computer search by {label}",
            result.get("errorCode"),
            result.get("errorText"),
        )
    return first_record_id(result)


# ─── Resolver ────────────────────────────────────────────────────

def build_tiers(serial, audit_id=None, computer_types=COMPUTER_TYPES):
    """Ordered (label, SearchParams) pairs for the tiers that apply."""
    template = computer_search_template()
    tiers = []

    if audit_id:
        tiers.append(("audit id", audit_id_params(template, audit_id)))
    else:
        log.info("No audit id available — skipping audit id lookup")

    if serial:
        tiers.append(("active serial", active_serial_params(template, serial, computer_types)))
        tiers.append(("inactive serial", inactive_serial_params(template, serial, computer_types)))
    else:
        log.warning("No BIOS serial available — skipping serial lookups")

    return tiers


def resolve_computer_id(credentials, token, base_url, serial, audit_id=None,
                        computer_types=COMPUTER_TYPES, max_tries=0, timeout=None):
    """
    Return the ID of the Computer record for this machine, or None.

    Raises ApiLogicalError / ApiNoDataError for a bad search envelope and
    lets invoker errors (HTTP, transport, grant) propagate.
    """
    for label, params in build_tiers(serial, audit_id, computer_types):
        result = search_computers(credentials, token, base_url, params,
                                  max_tries=max_tries, timeout=timeout)
        object_id = _match(label, result)
        if object_id is not None:
            log.info("Computer matched by %s: ID %s", label, object_id)
            return object_id
        log.info("No computer matched by %s", label)

    log.warning("No computer record found (serial=%s, audit id=%s)", serial, audit_id)
    return None

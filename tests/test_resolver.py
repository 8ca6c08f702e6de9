"""
Tests for the tiered computer resolver.

These tests verify:
1. Tier query shapes (audit id, active serial, inactive serial)
2. Filter groups built per type/status never share state
3. The first matching tier ends resolution; later tiers are not queried
4. The newest record (first row of an ID-descending search) wins
5. Bad envelopes raise, empty tiers fall through to None
"""

import pytest

from alloy_core.errors import ApiLogicalError, ApiNoDataError
from alloy_core.resolver import (
    active_serial_params,
    audit_id_params,
    build_tiers,
    computer_search_template,
    first_record_id,
    inactive_serial_params,
    resolve_computer_id,
)
from alloy_core.search import Filter

from tests.fakes import envelope, make_response, search_response


def group_as_tuples(group):
    return [(f.name, f.value, f.operation) for f in group]


def sent_filters(call):
    return call["json"]["filters"]


class TestQueryBuilders:

    def test_template_sorts_newest_first(self):
        payload = computer_search_template().to_payload()
        assert payload["sort"] == [{"field": "ID", "direction": "desc"}]
        assert payload["fields"] == [["ID"]]
        assert payload["filters"] == []

    def test_audit_id_tier(self):
        params = audit_id_params(computer_search_template(), "AUD-7")
        assert [group_as_tuples(g) for g in params.filters] == [[("Audit_ID", "AUD-7", "=")]]

    def test_active_serial_tier_one_group_per_type(self):
        params = active_serial_params(computer_search_template(), "SN123")

        assert len(params.filters) == 2
        assert group_as_tuples(params.filters[0]) == [
            ("Serial_Num", "SN123", "="),
            ("Type", "Desktop", "="),
            ("Status", "Inactive", "<>"),
            ("Status", "Missing", "<>"),
            ("Status", "Retired", "<>"),
        ]
        assert group_as_tuples(params.filters[1])[1] == ("Type", "Laptop", "=")

    def test_inactive_serial_tier_one_group_per_type_and_status(self):
        params = inactive_serial_params(computer_search_template(), "SN123")

        groups = [group_as_tuples(g) for g in params.filters]
        assert len(groups) == 6
        assert groups[0] == [
            ("Serial_Num", "SN123", "="),
            ("Type", "Desktop", "="),
            ("Status", "Inactive", "="),
        ]
        assert groups[-1] == [
            ("Serial_Num", "SN123", "="),
            ("Type", "Laptop", "="),
            ("Status", "Retired", "="),
        ]

    def test_custom_types(self):
        params = active_serial_params(computer_search_template(), "SN1", computer_types=["Server"])
        assert len(params.filters) == 1
        assert params.filters[0][1] == Filter("Type", "Server")

    def test_groups_are_isolated(self):
        template = computer_search_template()
        params = active_serial_params(template, "SN123")

        params.filters[0].append(Filter("Name", "tampered"))
        params.filters[0][0:1] = []

        assert len(params.filters[1]) == 5
        assert params.filters[1][0] == Filter("Serial_Num", "SN123")
        assert template.filters == []

        other = inactive_serial_params(template, "SN123")
        assert all(len(g) == 3 for g in other.filters)

    def test_tiers_do_not_share_template(self):
        template = computer_search_template()
        first = audit_id_params(template, "A1")
        second = active_serial_params(template, "SN1")

        first.sort.append({"field": "Name", "direction": "asc"})

        assert len(second.sort) == 1
        assert len(template.sort) == 1

    def test_build_tiers_skips_missing_inputs(self):
        assert [label for label, _ in build_tiers("SN1")] == ["active serial", "inactive serial"]
        assert [label for label, _ in build_tiers(None, audit_id="A1")] == ["audit id"]
        assert build_tiers(None) == []


class TestFirstRecordId:

    @pytest.mark.parametrize("data,expected", [
        ([42, 17], 42),
        ([[42], [17]], 42),
        ([{"ID": 42}], 42),
        ([], None),
    ])
    def test_row_shapes(self, data, expected):
        assert first_record_id(envelope(data)) == expected

    def test_missing_response_object(self):
        assert first_record_id({"success": True}) is None

    def test_data_not_a_list(self):
        result = {"success": True, "responseObject": {"Data": {"ID": 42}}}
        assert first_record_id(result) is None


class TestResolveComputerId:

    def test_audit_id_match_skips_serial_tiers(self, session, clock, credentials, valid_token, base_url):
        session.on("POST", "Computers", search_response([55]))

        object_id = resolve_computer_id(credentials, valid_token, base_url, "SN123", audit_id="AUD-1")

        assert object_id == 55
        assert len(session.calls) == 1
        assert sent_filters(session.calls[0]) == [
            [{"name": "Audit_ID", "value": "AUD-1", "operation": "="}],
        ]

    def test_active_tier_returns_newest_id(self, session, clock, credentials, valid_token, base_url):
        # Server honours the ID-descending sort: newest first
        session.on("POST", "Computers", search_response([]), search_response([88, 61, 12]))

        object_id = resolve_computer_id(credentials, valid_token, base_url, "SN123", audit_id="AUD-1")

        assert object_id == 88
        assert len(session.calls) == 2
        second = sent_filters(session.calls[1])
        assert len(second) == 2
        assert {"name": "Status", "value": "Retired", "operation": "<>"} in second[0]

    def test_falls_through_to_inactive_tier(self, session, clock, credentials, valid_token, base_url):
        session.on("POST", "Computers", search_response([]), search_response([42, 17]))

        object_id = resolve_computer_id(credentials, valid_token, base_url, "SN123")

        assert object_id == 42
        assert len(session.calls) == 2
        assert len(sent_filters(session.calls[1])) == 6

    def test_no_match_returns_none(self, session, clock, credentials, valid_token, base_url):
        session.on("POST", "Computers", search_response([]))

        assert resolve_computer_id(credentials, valid_token, base_url, "SN123", audit_id="A") is None
        assert len(session.calls) == 3

    def test_no_serial_and_no_audit_id_makes_no_calls(self, session, clock, credentials, valid_token, base_url):
        assert resolve_computer_id(credentials, valid_token, base_url, None) is None
        assert session.calls == []

    def test_logical_failure_raises(self, session, clock, credentials, valid_token, base_url):
        session.on("POST", "Computers", search_response(success=False, error_code=3, error_text="Denied"))

        with pytest.raises(ApiLogicalError) as exc_info:
            resolve_computer_id(credentials, valid_token, base_url, "SN123")

        assert exc_info.value.error_code == 3
        assert exc_info.value.error_text == "Denied"
        assert len(session.calls) == 1

    def test_empty_body_raises_no_data(self, session, clock, credentials, valid_token, base_url):
        session.on("POST", "Computers", make_response(200))

        with pytest.raises(ApiNoDataError):
            resolve_computer_id(credentials, valid_token, base_url, "SN123")

    def test_token_granted_once_across_tiers(self, session, clock, credentials, token, base_url):
        session.on("POST", "token", make_response(200, {
            "access_token": "t", "token_type": "Bearer", "expires_in": 600,
        }))
        session.on("POST", "Computers", search_response([]), search_response([]), search_response([9]))

        assert resolve_computer_id(credentials, token, base_url, "SN123", audit_id="A") == 9
        assert len(session.calls_to("POST", "token")) == 1

    def test_non_object_body_raises_no_data(self, session, clock, credentials, valid_token, base_url):
        session.on("POST", "Computers", make_response(200, [1, 2]))

        with pytest.raises(ApiNoDataError):
            resolve_computer_id(credentials, valid_token, base_url, "SN123")

        assert len(session.calls) == 1

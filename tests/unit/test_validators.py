from datetime import date

import pytest
from pydantic import ValidationError

from productdb.core.observability import parse_headers
from productdb.models import RelationshipReconcileRequest, VendorCreateRequest
from productdb.utils.validators import parse_release_date, require_non_empty, require_uuid


def test_require_uuid_normalizes_case():
    assert require_uuid("0F8FAD5B-D9CB-469F-A165-70867728950E") == "0f8fad5b-d9cb-469f-a165-70867728950e"

    with pytest.raises(ValueError):
        require_uuid("not-a-uuid")


def test_require_non_empty_strips_whitespace():
    assert require_non_empty("  Acme ") == "Acme"

    with pytest.raises(ValueError):
        require_non_empty("   ")


def test_parse_release_date_is_strict():
    assert parse_release_date("2024-02-29") == date(2024, 2, 29)

    for raw in ("2024-2-29", "2023-02-29", "29.02.2024", "2024-02-29T00:00:00"):
        with pytest.raises(ValueError):
            parse_release_date(raw)


def test_vendor_name_is_required():
    with pytest.raises(ValidationError):
        VendorCreateRequest(name="")


def test_reconcile_request_accepts_short_aliases_and_dedupes_targets():
    target = "0f8fad5b-d9cb-469f-a165-70867728950e"
    payload = RelationshipReconcileRequest.model_validate(
        {
            "source": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
            "previous_category": "installed_on",
            "category": "installed_with",
            "target_node_ids": [target, target.upper()],
        }
    )

    assert payload.source_node_id == "7c9e6679-7425-40de-944b-e07fc1f90ae7"
    assert payload.new_category.value == "installed_with"
    assert payload.target_node_ids == [target]


def test_parse_exporter_headers():
    assert parse_headers("api-key=abc, x-team = catalog,broken") == {"api-key": "abc", "x-team": "catalog"}
    assert parse_headers(None) == {}

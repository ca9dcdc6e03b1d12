from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest

from vanish.models import (
    AttachmentMeta,
    EmailDetail,
    EmailSummary,
    GenerateEmailOptions,
    ListEmailsOptions,
    PaginatedEmailList,
)

DETAIL_FIXTURE = """
{
  "id": "em_9",
  "from": "news@site.test",
  "to": ["tmp1@vanish.test", "tmp2@vanish.test"],
  "subject": "Weekly digest",
  "html": "<h1>Digest</h1>",
  "text": "Digest",
  "receivedAt": "2024-06-02T08:30:00Z",
  "hasAttachments": true,
  "attachments": [
    {"id": "att_a", "name": "digest.csv", "type": "text/csv", "size": 512}
  ]
}
"""

PAGE_FIXTURE = """
{
  "data": [
    {
      "id": "em_9",
      "from": "news@site.test",
      "subject": "Weekly digest",
      "textPreview": "Digest",
      "receivedAt": "2024-06-02T08:30:00Z",
      "hasAttachments": true
    }
  ],
  "nextCursor": null,
  "total": 1
}
"""


def test_email_detail_round_trip_preserves_fields() -> None:
    raw = json.loads(DETAIL_FIXTURE)

    detail = EmailDetail.from_dict(raw)

    assert detail.to_dict() == raw
    assert EmailDetail.from_dict(json.loads(json.dumps(detail.to_dict()))) == detail


def test_email_detail_round_trip_with_null_attachments() -> None:
    raw = json.loads(DETAIL_FIXTURE)
    raw["attachments"] = None
    raw["hasAttachments"] = False

    detail = EmailDetail.from_dict(raw)

    assert detail.attachments is None
    assert detail.to_dict() == raw


def test_email_detail_absent_attachments_encode_as_null() -> None:
    raw = json.loads(DETAIL_FIXTURE)
    del raw["attachments"]

    encoded = EmailDetail.from_dict(raw).to_dict()

    assert encoded["attachments"] is None


def test_page_round_trip_keeps_null_cursor() -> None:
    raw = json.loads(PAGE_FIXTURE)

    page = PaginatedEmailList.from_dict(raw)

    assert page.next_cursor is None
    assert page.to_dict() == raw
    assert json.loads(json.dumps(page.to_dict()))["nextCursor"] is None


def test_summary_parses_timestamp_as_utc() -> None:
    summary = EmailSummary.from_dict(json.loads(PAGE_FIXTURE)["data"][0])

    assert summary.received_at == datetime(2024, 6, 2, 8, 30, tzinfo=UTC)
    assert summary.sender == "news@site.test"


def test_missing_fields_decode_to_zero_values() -> None:
    summary = EmailSummary.from_dict({"id": "em_1"})

    assert summary.subject == ""
    assert summary.received_at is None
    assert summary.has_attachments is False
    assert PaginatedEmailList.from_dict({}).data == []
    assert AttachmentMeta.from_dict({"id": "a"}).size == 0


def test_generate_options_omit_unset_fields() -> None:
    assert GenerateEmailOptions().to_dict() == {}
    assert GenerateEmailOptions(domain="vanish.test").to_dict() == {"domain": "vanish.test"}
    assert GenerateEmailOptions(domain="", prefix="").to_dict() == {}


def test_list_options_params() -> None:
    assert ListEmailsOptions().to_params() == {}
    assert ListEmailsOptions(limit=0).to_params() == {}
    assert ListEmailsOptions(limit=-3, cursor="").to_params() == {}
    assert ListEmailsOptions(limit=20).to_params() == {"limit": "20"}
    assert ListEmailsOptions(cursor="c_1").to_params() == {"cursor": "c_1"}


def test_offset_timestamp_round_trips_as_sent() -> None:
    raw = json.loads(DETAIL_FIXTURE)
    raw["receivedAt"] = "2024-06-02T10:30:00.123+02:00"

    detail = EmailDetail.from_dict(raw)

    assert detail.received_at.utcoffset() == timedelta(hours=2)
    assert detail.to_dict()["receivedAt"] == "2024-06-02T10:30:00.123+02:00"


def test_fractional_utc_timestamp_round_trips_as_sent() -> None:
    raw = json.loads(PAGE_FIXTURE)
    raw["data"][0]["receivedAt"] = "2024-06-02T08:30:00.123Z"

    assert PaginatedEmailList.from_dict(raw).to_dict() == raw


@pytest.mark.parametrize(
    ("build", "raw"),
    [
        (PaginatedEmailList.from_dict, {"total": "3"}),
        (PaginatedEmailList.from_dict, {"total": True}),
        (PaginatedEmailList.from_dict, {"data": "x"}),
        (PaginatedEmailList.from_dict, {"nextCursor": 7}),
        (EmailSummary.from_dict, {"from": 5}),
        (EmailSummary.from_dict, {"hasAttachments": "yes"}),
        (EmailDetail.from_dict, {"to": "tmp1@vanish.test"}),
        (EmailDetail.from_dict, {"to": [1]}),
        (EmailDetail.from_dict, {"attachments": {"id": "a"}}),
        (AttachmentMeta.from_dict, {"size": 1.5}),
        (AttachmentMeta.from_dict, []),
    ],
)
def test_wrongly_typed_fields_are_rejected(build, raw) -> None:
    with pytest.raises(TypeError):
        build(raw)


def test_unparseable_timestamp_is_rejected() -> None:
    with pytest.raises(ValueError):
        EmailSummary.from_dict({"receivedAt": "yesterday"})

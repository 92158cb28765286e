from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from leetsync.domain.models import Difficulty, Record


def test_record_decodes_camel_case_row():
    record = Record.model_validate(
        {
            "link": "https://leetcode.com/problems/two-sum/",
            "id": "two-sum",
            "difficulty": "Easy",
            "repeatDate": "2024-03-01",
            "lastCompletionDate": "2024-02-20T08:30:00Z",
        }
    )

    assert record.id == "two-sum"
    assert record.difficulty is Difficulty.EASY
    assert record.repeat_date == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert record.last_completion_date == datetime(2024, 2, 20, 8, 30, tzinfo=timezone.utc)


def test_record_accepts_title_slug_as_id():
    record = Record.model_validate(
        {
            "link": "l",
            "titleSlug": "add-two-numbers",
            "difficulty": "Medium",
            "repeatDate": "2024-03-01",
            "lastCompletionDate": "2024-03-01",
        }
    )

    assert record.id == "add-two-numbers"


def test_record_is_frozen(record_factory):
    record = record_factory()

    with pytest.raises(ValidationError):
        record.id = "other"


def test_record_rejects_unknown_difficulty():
    with pytest.raises(ValidationError):
        Record(
            link="l",
            id="x",
            difficulty="Impossible",
            repeat_date="2024-01-01",
            last_completion_date="2024-01-01",
        )


def test_to_wire_uses_camel_case_keys(record_factory):
    wire = record_factory("two-sum", repeat_date="2024-03-01").to_wire()

    assert set(wire) == {"link", "id", "difficulty", "repeatDate", "lastCompletionDate"}
    assert wire["difficulty"] == "Easy"
    assert wire["repeatDate"].startswith("2024-03-01T00:00:00")

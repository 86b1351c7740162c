from __future__ import annotations

import dataclasses
import json

import pytest

from syslog_ingest.core.models import (
    DecodeFailure,
    Facility,
    ListenerStats,
    ParseErrorKind,
    Severity,
    SyslogRecord,
)


def test_facility_codes_cover_pri_range() -> None:
    assert len(Facility) == 24
    assert Facility(0) is Facility.KERN
    assert Facility(23) is Facility.LOCAL7


def test_record_to_dict_is_json_ready() -> None:
    record = SyslogRecord(Facility.AUTH, Severity.ERROR, "bastion", "sshd: denied")
    payload = json.loads(json.dumps(record.to_dict()))
    assert payload == {"facility": 4, "severity": 3, "hostname": "bastion", "message": "sshd: denied"}
    assert record.priority == 35


def test_record_is_immutable() -> None:
    record = SyslogRecord(Facility.USER, Severity.NOTICE, "h", "m")
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.hostname = "other"  # type: ignore[misc]


def test_decode_failure_defaults() -> None:
    failure = DecodeFailure(raw="garbage", reason=ParseErrorKind.MISSING_DELIMITERS)
    assert failure.peer is None
    assert failure.detail == ""


def test_listener_stats_start_at_zero() -> None:
    stats = ListenerStats()
    assert all(getattr(stats, f.name) == 0 for f in dataclasses.fields(stats))

from __future__ import annotations

import json
import threading
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

import pytest

from pyhealthmon.exceptions import PersistenceError
from pyhealthmon.models import EnrichedReading, FullReading
from pyhealthmon.persistence.daily_log import BackgroundLogWriter, DailyLogWriter


def _dt(day: int = 1, hour: int = 12) -> datetime:
    return datetime(2024, 3, day, hour, tzinfo=UTC)


def _reading(number: int, now: datetime | None = None) -> EnrichedReading:
    packet = FullReading.model_validate(
        {"deviceId": "dev", "packetType": "data", "packetNumber": number, "note": "température"}
    )
    return EnrichedReading.enrich(packet, address="10.0.0.2", port=4210, now=now or _dt())


def _lines(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_append_writes_one_line_per_reading(tmp_path: Path) -> None:
    writer = DailyLogWriter(tmp_path / "logs", clock=_dt)

    writer.append(_reading(1))
    writer.append(_reading(2))

    path = tmp_path / "logs" / "health_data_udp_2024-03-01.json"
    records = _lines(path)
    assert [r["packetNumber"] for r in records] == [1, 2]
    assert records[0]["serverTimestamp"] == "2024-03-01T12:00:00.000Z"
    assert records[0]["remoteInfo"] == {"address": "10.0.0.2", "port": 4210}


def test_lines_are_compact_utf8(tmp_path: Path) -> None:
    writer = DailyLogWriter(tmp_path, clock=_dt)

    writer.append(_reading(1))

    text = (tmp_path / "health_data_udp_2024-03-01.json").read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert text.count("\n") == 1
    assert "température" in text
    assert ": " not in text


def test_day_rollover_starts_new_file(tmp_path: Path) -> None:
    writer = DailyLogWriter(tmp_path)

    writer.append(_reading(1), now=_dt(day=1, hour=23))
    writer.append(_reading(2), now=_dt(day=2, hour=0))

    assert len(_lines(tmp_path / "health_data_udp_2024-03-01.json")) == 1
    assert len(_lines(tmp_path / "health_data_udp_2024-03-02.json")) == 1


def test_file_date_is_taken_in_utc(tmp_path: Path) -> None:
    writer = DailyLogWriter(tmp_path)
    local = datetime(2024, 3, 2, 1, 0, tzinfo=timezone(timedelta(hours=5)))

    assert writer.path_for(local).name == "health_data_udp_2024-03-01.json"


def test_existing_file_is_appended_not_truncated(tmp_path: Path) -> None:
    path = tmp_path / "health_data_udp_2024-03-01.json"
    path.write_text('{"existing":true}\n', encoding="utf-8")
    writer = DailyLogWriter(tmp_path, clock=_dt)

    writer.append(_reading(1))

    records = _lines(path)
    assert records[0] == {"existing": True}
    assert records[1]["packetNumber"] == 1


def test_unwritable_directory_raises_persistence_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    writer = DailyLogWriter(blocker, clock=_dt)

    with pytest.raises(PersistenceError) as excinfo:
        writer.append(_reading(1))

    assert "health_data_udp_2024-03-01.json" in excinfo.value.path


def test_background_writer_drains_on_close(tmp_path: Path) -> None:
    writer = BackgroundLogWriter(DailyLogWriter(tmp_path), max_queue=100, clock=_dt)

    for number in range(20):
        writer.append(_reading(number))
    writer.close()

    assert writer.written == 20
    assert writer.dropped == 0
    assert not writer.is_running
    assert len(_lines(tmp_path / "health_data_udp_2024-03-01.json")) == 20


def test_background_writer_counts_failures(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    writer = BackgroundLogWriter(DailyLogWriter(blocker), clock=_dt)

    writer.append(_reading(1))
    writer.close()

    assert writer.failed == 1
    assert writer.written == 0


def test_background_writer_close_without_appends_is_noop(tmp_path: Path) -> None:
    writer = BackgroundLogWriter(DailyLogWriter(tmp_path))

    writer.close()

    assert not writer.is_running
    assert list(tmp_path.iterdir()) == []


def test_concurrent_appends_never_interleave(tmp_path: Path) -> None:
    writer = DailyLogWriter(tmp_path, clock=_dt)
    threads_count, per_thread = 8, 50
    start = threading.Barrier(threads_count)

    def worker(thread_index: int) -> None:
        start.wait()
        for index in range(per_thread):
            packet = FullReading.model_validate(
                {
                    "deviceId": f"dev-{thread_index}",
                    "packetType": "data",
                    "packetNumber": index,
                    "blob": "x" * 16_384,
                }
            )
            writer.append(EnrichedReading.enrich(packet, address="10.0.0.2", port=4210, now=_dt()))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    records = _lines(tmp_path / "health_data_udp_2024-03-01.json")
    assert len(records) == threads_count * per_thread
    assert all(len(r["blob"]) == 16_384 for r in records)
    for thread_index in range(threads_count):
        numbers = [r["packetNumber"] for r in records if r["deviceId"] == f"dev-{thread_index}"]
        assert numbers == list(range(per_thread))

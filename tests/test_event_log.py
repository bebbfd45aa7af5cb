import json
from datetime import timedelta

import pytest

from posture_monitor.event_log import JsonEventLog, MemorySink, summarize
from posture_monitor.labels import PostureLabel
from posture_monitor.session import SessionEvent


@pytest.fixture
def events(t0):
    return [
        SessionEvent(PostureLabel.STANDING, t0, 120.0, False),
        SessionEvent(PostureLabel.FALLING, t0 + timedelta(minutes=2), 30.0, True),
        SessionEvent(PostureLabel.SITTING, t0 + timedelta(minutes=45), 600.0, False),
        SessionEvent(PostureLabel.SITTING, t0 + timedelta(hours=1), 20.0, False),
    ]


def test_memory_sink_keeps_order(events):
    sink = MemorySink()
    for e in events:
        sink.emit(e)
    assert sink.events == events


def test_json_log_survives_restart(tmp_path, events):
    path = tmp_path / 'logs' / 'events.json'
    log = JsonEventLog(path)
    for e in events:
        log.emit(e)

    reloaded = JsonEventLog(path)
    assert reloaded.events == events

    on_disk = json.loads(path.read_text(encoding='utf-8'))
    assert [entry['type'] for entry in on_disk] == ['standing', 'falling', 'sitting', 'sitting']
    assert on_disk[1]['is_critical'] is True


def test_without_autosave_nothing_is_written(tmp_path, events):
    path = tmp_path / 'events.json'
    log = JsonEventLog(path, autosave=False)
    log.emit(events[0])
    assert not path.exists()
    log.save()
    assert path.exists()


def test_unreadable_file_starts_empty(tmp_path):
    path = tmp_path / 'events.json'
    path.write_text('{broken', encoding='utf-8')
    assert JsonEventLog(path).events == []


def test_malformed_entries_are_skipped(tmp_path, events):
    path = tmp_path / 'events.json'
    good = events[0].to_dict()
    path.write_text(json.dumps([good, {'type': 'dancing'}, 'junk']), encoding='utf-8')

    log = JsonEventLog(path)
    assert log.events == [events[0]]


def test_clear(tmp_path, events):
    path = tmp_path / 'events.json'
    log = JsonEventLog(path)
    log.emit(events[0])
    log.clear()
    assert JsonEventLog(path).events == []


def test_summary(events):
    summary = summarize(events)
    assert summary['total_events'] == 4
    assert summary['fall_count'] == 1
    assert summary['last_event'] == '09:00'
    assert summary['postures']['sitting'] == {'count': 2, 'total_seconds': 620.0}
    assert summary['postures']['laying'] == {'count': 0, 'total_seconds': 0.0}


def test_empty_summary():
    summary = summarize([])
    assert summary['total_events'] == 0
    assert summary['last_event'] is None

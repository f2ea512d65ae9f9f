import json

import pytest

from alarms.clock import ClockTime, Period
from alarms.shifts import ShiftSchedule
from alarms.storage import load_shift_schedules, save_shift_schedules


def test_missing_file_gives_defaults(tmp_path):
    schedules = load_shift_schedules(tmp_path / "shifts.json")
    assert list(schedules) == ["Shift 1", "Shift 2", "Shift 3"]
    assert schedules["Shift 2"].times == (ClockTime(3, 55, Period.PM), ClockTime(7, 55, Period.PM))


def test_file_order_is_kept(tmp_path):
    path = tmp_path / "shifts.json"
    path.write_text(json.dumps({"Late": ["11:00 PM", "01:00 AM"], "Early": ["05:00 AM"]}), encoding="utf-8")
    schedules = load_shift_schedules(path)
    assert list(schedules) == ["Late", "Early"]
    assert schedules["Late"].times[1] == ClockTime(1, 0, Period.AM)


def test_corrupt_file_falls_back(tmp_path):
    path = tmp_path / "shifts.json"
    path.write_text("{not json", encoding="utf-8")
    assert "Shift 1" in load_shift_schedules(path)


def test_invalid_entries_raise(tmp_path):
    path = tmp_path / "shifts.json"
    path.write_text(json.dumps({"Broken": ["25:00 AM"]}), encoding="utf-8")
    with pytest.raises(ValueError, match="Broken"):
        load_shift_schedules(path)

    path.write_text(json.dumps({"Empty": []}), encoding="utf-8")
    with pytest.raises(ValueError, match="Empty"):
        load_shift_schedules(path)


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "shifts.json"
    schedules = {"Swing": ShiftSchedule.from_strings("Swing", ["12:00 PM", "04:30 PM"])}
    save_shift_schedules(path, schedules)
    assert json.loads(path.read_text(encoding="utf-8")) == {"Swing": ["12:00 PM", "04:30 PM"]}
    assert load_shift_schedules(path) == schedules

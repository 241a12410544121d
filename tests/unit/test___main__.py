"""Unit tests for the schedulebuilder command-line entry point."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import yaml

from schedulebuilder.__main__ import (
    EXIT_CONFLICT,
    EXIT_INVALID,
    EXIT_OK,
    _create_parser,
    load_events_file,
    main,
    run,
)

pytestmark = pytest.mark.unit

EVENTS = [
    {
        "id": "algebra",
        "title": "Algebra",
        "anchorDate": "2024-01-01",
        "startTime": "09:00",
        "endTime": "10:00",
        "recurring": True,
        "recurrenceType": "weekly",
    },
    {
        "id": "holiday",
        "title": "Holiday",
        "anchorDate": "2024-01-16",
        "allDay": True,
    },
    {"title": "Broken record without a date"},
]


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each CLI test in an empty directory so no stray config file is read."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "events.yaml").write_text(yaml.safe_dump(EVENTS))
    return tmp_path


def _write_candidate(path: Path, **record) -> str:
    candidate = {
        "title": "Study group",
        "anchorDate": "2024-01-15",
        "startTime": "09:30",
        "endTime": "10:30",
    }
    candidate.update(record)
    target = path / "candidate.yaml"
    target.write_text(yaml.safe_dump(candidate))
    return str(target)


class TestCreateParser:
    def test_create_parser_when_called_then_returns_parser(self) -> None:
        parser = _create_parser()
        assert parser.prog == "schedulebuilder"
        assert "Schedule Builder" in parser.description

    def test_create_parser_when_no_command_then_exits(self) -> None:
        with pytest.raises(SystemExit):
            _create_parser().parse_args([])

    def test_create_parser_when_invalid_date_then_exits(self) -> None:
        with pytest.raises(SystemExit):
            _create_parser().parse_args(["day", "--date", "2023-02-29"])

    def test_create_parser_parses_check_arguments(self) -> None:
        args = _create_parser().parse_args(
            ["--debug", "check", "--candidate", "c.yaml", "--exclude-id", "abc"]
        )
        assert args.debug
        assert args.command == "check"
        assert args.candidate == "c.yaml"
        assert args.exclude_id == "abc"


class TestLoadEventsFile:
    def test_skips_undecodable_records(self, workdir: Path) -> None:
        events = load_events_file(str(workdir / "events.yaml"))
        assert [e.id for e in events] == ["algebra", "holiday"]

    def test_empty_file_has_no_events(self, workdir: Path) -> None:
        path = workdir / "empty.yaml"
        path.write_text("")
        assert load_events_file(str(path)) == []

    def test_non_list_raises(self, workdir: Path) -> None:
        path = workdir / "mapping.yaml"
        path.write_text("title: not a list\n")
        with pytest.raises(ValueError, match="list of event records"):
            load_events_file(str(path))


class TestDayCommand:
    def test_day_lists_matching_events(self, workdir: Path, capsys) -> None:
        assert run(["day", "--events", "events.yaml", "--date", "2024-01-15"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "1 event(s) on 2024-01-15" in out
        assert "Algebra [algebra] 9:00 AM - 10:00 AM (repeats weekly)" in out

    def test_day_without_events(self, workdir: Path, capsys) -> None:
        assert run(["day", "--events", "events.yaml", "--date", "2024-01-17"]) == EXIT_OK
        assert "No events on 2024-01-17" in capsys.readouterr().out

    def test_events_file_from_config(self, workdir: Path, capsys) -> None:
        (workdir / "schedulebuilder.yaml").write_text("events_file: events.yaml\n")
        assert run(["day", "--date", "2024-01-16"]) == EXIT_OK
        assert "Holiday [holiday] all day" in capsys.readouterr().out

    def test_missing_events_file_option(self, workdir: Path, capsys) -> None:
        assert run(["day", "--date", "2024-01-16"]) == EXIT_INVALID
        assert "No events file given" in capsys.readouterr().err

    def test_unreadable_events_file(self, workdir: Path, capsys) -> None:
        assert run(["day", "--events", "missing.yaml", "--date", "2024-01-16"]) == EXIT_INVALID
        assert "Failed to load events" in capsys.readouterr().err


class TestCheckCommand:
    def test_conflict_exits_one(self, workdir: Path, capsys) -> None:
        candidate = _write_candidate(workdir)
        code = run(["check", "--events", "events.yaml", "--candidate", candidate])
        assert code == EXIT_CONFLICT
        out = capsys.readouterr().out
        assert "Schedule conflict detected for Study group" in out
        assert "Algebra [algebra]" in out

    def test_no_conflict_exits_zero(self, workdir: Path, capsys) -> None:
        candidate = _write_candidate(workdir, startTime="10:00", endTime="11:00")
        code = run(["check", "--events", "events.yaml", "--candidate", candidate])
        assert code == EXIT_OK
        assert "No conflicts for Study group" in capsys.readouterr().out

    def test_exclude_id_ignores_edited_event(self, workdir: Path) -> None:
        candidate = _write_candidate(workdir, id="algebra")
        code = run(
            [
                "check",
                "--events",
                "events.yaml",
                "--candidate",
                candidate,
                "--exclude-id",
                "algebra",
            ]
        )
        assert code == EXIT_OK

    def test_invalid_candidate_exits_two(self, workdir: Path, capsys) -> None:
        candidate = _write_candidate(workdir, title=" ", startTime="11:00")
        code = run(["check", "--events", "events.yaml", "--candidate", candidate])
        assert code == EXIT_INVALID
        err = capsys.readouterr().err
        assert "Invalid event" in err
        assert "- Title is required" in err
        assert "- End time must be after start time" in err

    def test_missing_candidate_file_exits_two(self, workdir: Path, capsys) -> None:
        code = run(["check", "--events", "events.yaml", "--candidate", "nope.yaml"])
        assert code == EXIT_INVALID
        assert "Failed to load candidate" in capsys.readouterr().err


class TestGridCommand:
    def test_grid_places_events(self, workdir: Path, capsys) -> None:
        assert run(["grid", "--events", "events.yaml", "--date", "2024-01-15"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "09:00  Algebra  top=0.0% height=100.0%" in out
        assert "10:00  Algebra" not in out

    def test_grid_all_day_in_first_slot(self, workdir: Path, capsys) -> None:
        assert run(["grid", "--events", "events.yaml", "--date", "2024-01-16"]) == EXIT_OK
        assert "00:00  Holiday  top=0.0% height=100.0%" in capsys.readouterr().out


class TestMain:
    def test_main_exits_with_run_status(
        self, workdir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            sys, "argv", ["schedulebuilder", "day", "--events", "events.yaml", "--date", "2024-01-15"]
        )
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_OK

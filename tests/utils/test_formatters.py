"""Tests for output formatters."""

import json

import yaml

from skillpulse_cli.models import Task, TaskPage
from skillpulse_cli.utils.ui.formatters import (
    format_error,
    format_page,
    format_task_detail,
    format_tasks,
)

TASKS = [
    Task(
        id="20260209002",
        owner_id="u@x.com",
        description="Review PR",
        start_time="2026-02-09T09:00:00+00:00",
        end_time="2026-02-09T10:00:00+00:00",
    ),
    Task(id="20260209001", owner_id="u@x.com", description="Plan week"),
]


def test_json_output(capsys):
    format_tasks(TASKS, "json", next_cursor="20260209001")

    payload = json.loads(capsys.readouterr().out)
    assert [t["id"] for t in payload["tasks"]] == ["20260209002", "20260209001"]
    assert payload["tasks"][0]["start_time"] == "2026-02-09T09:00:00+00:00"
    assert payload["next_cursor"] == "20260209001"


def test_yaml_output(capsys):
    format_page(TaskPage(tasks=TASKS[1:]), "yaml")

    payload = yaml.safe_load(capsys.readouterr().out)
    assert payload["tasks"][0]["description"] == "Plan week"
    assert payload["next_cursor"] is None


def test_table_output(capsys):
    format_tasks(TASKS, "table", next_cursor="20260209001")

    out = capsys.readouterr().out
    assert "Review PR" in out
    assert "09:00 - 10:00" in out
    assert "--after 20260209001" in out


def test_empty_table(capsys):
    format_tasks([], "table")
    assert "No tasks yet" in capsys.readouterr().out


def test_empty_table_still_offers_next_page(capsys):
    format_tasks(
        [],
        "table",
        next_cursor="20260210001",
        empty_message="No tasks on 2026-02-09 in the loaded window",
    )

    out = capsys.readouterr().out
    assert "No tasks on 2026-02-09 in the loaded window" in out
    assert "--after 20260210001" in out


def test_detail_and_error(capsys):
    format_task_detail(TASKS[0])
    format_error("Task not found")

    out = capsys.readouterr().out
    assert "20260209002" in out
    assert "u@x.com" in out
    assert "Error:" in out

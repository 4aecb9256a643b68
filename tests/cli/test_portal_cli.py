from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from mystat.interfaces.cli import cli
from mystat.interfaces.cli import __main__ as cli_main
from mystat.services.portal import MystatClient


@pytest.fixture(autouse=True)
def _no_global_logging(monkeypatch):
    monkeypatch.setattr(cli_main, "configure_logging", lambda **_: None)


@pytest.fixture
def factory(portal, valid_session, now):
    created = []

    def _factory(credential, settings):
        client = MystatClient(
            credential,
            settings=settings,
            session=valid_session,
            transport=portal.transport(),
            clock=lambda: now,
        )
        created.append((credential, settings))
        return client

    _factory.created = created
    return _factory


def _invoke(factory, *args, input=None):
    runner = CliRunner()
    return runner.invoke(
        cli,
        ["--username", "student", "--password", "s3cret", *args],
        obj={"client_factory": factory},
        input=input,
    )


def test_get_prints_payload_as_json(portal, factory):
    reviews = [{"date": "2024-02-28", "message": "Great progress"}]
    portal.routes["reviews/index/list"] = reviews

    result = _invoke(factory, "get", "reviews")

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == reviews


def test_failure_exits_with_code_one(portal, factory):
    portal.routes["reviews/index/list"] = {"code": 0, "message": "Service disabled"}

    result = _invoke(factory, "get", "reviews")

    assert result.exit_code == 1
    assert "upstream: Service disabled" in result.output


def test_language_and_timeout_reach_settings(portal, factory):
    portal.routes["news/operations/latest-news"] = []

    result = _invoke(factory, "--language", "en_US", "--timeout", "7", "news")

    assert result.exit_code == 0, result.output
    _, settings = factory.created[0]
    assert settings.language == "en_US"
    assert settings.timeout_seconds == 7
    assert portal.api_requests()[0].headers["x-language"] == "en_US"


def test_password_prompted_when_missing(portal, factory):
    portal.routes["dashboard/info/future-exams"] = []

    result = CliRunner().invoke(
        cli,
        ["--username", "student", "exams", "--future"],
        obj={"client_factory": factory},
        input="typed-password\n",
        env={"MYSTAT_PASSWORD": ""},
    )

    assert result.exit_code == 0, result.output
    credential, _ = factory.created[0]
    assert credential.password == "typed-password"


def test_homework_command_passes_filters(portal, factory):
    portal.routes["settings/user-info"] = {"student_id": 1, "current_group_id": 5}
    portal.routes["homework/operations/list"] = []

    result = _invoke(factory, "homework", "--status", "checked", "--page", "2", "--type", "lab")

    assert result.exit_code == 0, result.output
    params = portal.api_requests("homework/operations/list")[0].url.params
    assert params["status"] == "1"
    assert params["page"] == "2"
    assert params["type"] == "1"
    assert params["group_id"] == "5"


def test_schedule_rejects_bad_date(factory):
    result = _invoke(factory, "schedule", "--date", "05.03.2024")

    assert result.exit_code == 2
    assert "YYYY-MM-DD" in result.output


def test_schedule_month(portal, factory):
    portal.routes["schedule/operations/get-month"] = []

    result = _invoke(factory, "schedule", "--month", "--date", "2024-03-05")

    assert result.exit_code == 0, result.output
    assert portal.api_requests()[0].url.params["date_filter"] == "2024-3-5"


def test_upload_requires_text_or_file(factory):
    result = _invoke(factory, "upload", "5001")

    assert result.exit_code == 2
    assert "--text" in result.output


def test_upload_with_file(portal, factory, tmp_path):
    portal.routes["homework/operations/create"] = {"id": 1}
    answer = tmp_path / "solution.py"
    answer.write_text("print(1)", encoding="utf-8")

    result = _invoke(factory, "upload", "5001", "--file", str(answer), "--hours", "2")

    assert result.exit_code == 0, result.output
    body = portal.api_requests()[0].content
    assert b'filename="solution.py"' in body


def test_delete_requires_confirmation(portal, factory):
    portal.routes["homework/operations/delete"] = True

    aborted = _invoke(factory, "delete", "5001", input="n\n")
    confirmed = _invoke(factory, "delete", "5001", "--yes")

    assert aborted.exit_code == 1
    assert confirmed.exit_code == 0
    assert len(portal.api_requests("homework/operations/delete")) == 1


def test_login_reports_expiry(portal, factory, now):
    result = _invoke(factory, "login")

    assert result.exit_code == 0, result.output
    assert portal.login_calls == 1
    assert "expires_at" in json.loads(result.output)


def test_leaders_and_activity(portal, factory):
    portal.routes["dashboard/progress/leader-stream"] = [{"full_name": "A. Leader", "position": 1}]
    portal.routes["dashboard/progress/leader-group"] = []
    portal.routes["dashboard/progress/activity-web"] = []

    leaders = _invoke(factory, "leaders", "--stream")
    group = _invoke(factory, "leaders", "--group")
    activity = _invoke(factory, "activity", "--log")

    assert leaders.exit_code == 0, leaders.output
    assert group.exit_code == 0, group.output
    assert activity.exit_code == 0, activity.output
    assert json.loads(leaders.output)[0]["full_name"] == "A. Leader"
    assert json.loads(group.output) == []
    assert len(portal.api_requests("dashboard/progress/leader-group")) == 1

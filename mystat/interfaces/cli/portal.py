"""CLI commands that call the MyStat API and print the JSON payload."""

from __future__ import annotations

from datetime import date, datetime

import click

from mystat.domain.models import HomeworkStatus, HomeworkType, Success
from mystat.services.portal import MystatClient

from .context import run_call

# Parameterless endpoints reachable through ``mystat get NAME``.
SIMPLE_ENDPOINTS = {
    "user-info": MystatClient.get_user_info,
    "settings": MystatClient.get_user_settings,
    "reviews": MystatClient.get_reviews,
    "visits": MystatClient.get_visits,
    "attendance": MystatClient.get_attendance,
    "homework-count": MystatClient.get_homework_count,
    "group-history": MystatClient.get_group_info,
}

_STATUS_CHOICES = [status.name.lower() for status in HomeworkStatus]
_TYPE_CHOICES = [kind.name.lower() for kind in HomeworkType]


def _parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    return datetime.strptime(value, "%Y-%m-%d").date()


@click.command(name="login")
@click.pass_context
def login(ctx: click.Context) -> None:
    """Log in and show when the issued token expires."""

    async def _call(client: MystatClient):
        result = await client.authenticate()
        if not result.ok:
            return result
        return Success({"expires_at": result.data.expires_at.isoformat()})

    run_call(ctx, _call)


@click.command(name="get")
@click.argument("endpoint", type=click.Choice(sorted(SIMPLE_ENDPOINTS)))
@click.pass_context
def get(ctx: click.Context, endpoint: str) -> None:
    """Fetch a parameterless ENDPOINT."""
    method = SIMPLE_ENDPOINTS[endpoint]
    run_call(ctx, lambda client: method(client))


@click.command(name="schedule")
@click.option("--date", "day", default=None, help="Day as YYYY-MM-DD (default: today).")
@click.option("--month", is_flag=True, default=False, help="Show the whole month.")
@click.pass_context
def schedule(ctx: click.Context, day: str | None, month: bool) -> None:
    """Show lessons for a day or a month."""
    try:
        parsed = _parse_day(day)
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD", param_hint="--date")
    if month:
        run_call(ctx, lambda client: client.get_month_schedule(parsed))
    else:
        run_call(ctx, lambda client: client.get_schedule_by_date(parsed))


@click.command(name="homework")
@click.option(
    "--status",
    type=click.Choice(_STATUS_CHOICES),
    default="active",
    show_default=True,
    help="Homework status filter.",
)
@click.option("--page", type=int, default=1, show_default=True, help="Result page.")
@click.option(
    "--type",
    "homework_type",
    type=click.Choice(_TYPE_CHOICES),
    default="homework",
    show_default=True,
    help="Homework or lab work.",
)
@click.pass_context
def homework(ctx: click.Context, status: str, page: int, homework_type: str) -> None:
    """List homework for the current group."""
    run_call(
        ctx,
        lambda client: client.get_homework_list(
            HomeworkStatus[status.upper()], page, HomeworkType[homework_type.upper()]
        ),
    )


@click.command(name="upload")
@click.argument("homework_id", type=int)
@click.option("--text", "answer_text", default=None, help="Answer text.")
@click.option(
    "--file",
    "file_path",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    default=None,
    help="File to attach.",
)
@click.option("--hours", type=int, default=None, help="Hours spent.")
@click.option("--minutes", type=int, default=None, help="Minutes spent.")
@click.pass_context
def upload_homework(
    ctx: click.Context,
    homework_id: int,
    answer_text: str | None,
    file_path: str | None,
    hours: int | None,
    minutes: int | None,
) -> None:
    """Submit an answer for HOMEWORK_ID."""
    if not answer_text and file_path is None:
        raise click.UsageError("Provide --text, --file, or both.")
    kwargs = {}
    if hours is not None:
        kwargs["spent_time_hour"] = hours
    if minutes is not None:
        kwargs["spent_time_min"] = minutes
    run_call(
        ctx,
        lambda client: client.upload_homework(
            homework_id, answer_text=answer_text, file=file_path, **kwargs
        ),
    )


@click.command(name="delete")
@click.argument("homework_id", type=int)
@click.confirmation_option(prompt="Delete this homework submission?")
@click.pass_context
def delete_homework(ctx: click.Context, homework_id: int) -> None:
    """Delete the submission for HOMEWORK_ID."""
    run_call(ctx, lambda client: client.delete_homework(homework_id))


@click.command(name="news")
@click.option("--id", "news_id", type=int, default=None, help="Show one news item.")
@click.pass_context
def news(ctx: click.Context, news_id: int | None) -> None:
    """Show the latest news or a single item."""
    if news_id is None:
        run_call(ctx, lambda client: client.get_latest_news())
    else:
        run_call(ctx, lambda client: client.get_news_details(news_id))


@click.command(name="exams")
@click.option("--future", is_flag=True, default=False, help="Only upcoming exams.")
@click.pass_context
def exams(ctx: click.Context, future: bool) -> None:
    """Show exam results or upcoming exams."""
    if future:
        run_call(ctx, lambda client: client.get_future_exams())
    else:
        run_call(ctx, lambda client: client.get_all_exams())


@click.command(name="leaders")
@click.option(
    "--stream/--group",
    "stream",
    default=False,
    show_default=True,
    help="Show the stream leaderboard instead of the group one.",
)
@click.pass_context
def leaders(ctx: click.Context, stream: bool) -> None:
    """Show the group or stream leaderboard."""
    if stream:
        run_call(ctx, lambda client: client.get_stream_leaders())
    else:
        run_call(ctx, lambda client: client.get_group_leaders())


@click.command(name="activity")
@click.option("--log", "as_log", is_flag=True, default=False, help="Group entries by day.")
@click.pass_context
def activity(ctx: click.Context, as_log: bool) -> None:
    """Show recent point-earning activity."""
    if as_log:
        run_call(ctx, lambda client: client.get_activity_log())
    else:
        run_call(ctx, lambda client: client.get_activity())


__all__ = [
    "SIMPLE_ENDPOINTS",
    "activity",
    "delete_homework",
    "exams",
    "get",
    "homework",
    "leaders",
    "login",
    "news",
    "schedule",
    "upload_homework",
]

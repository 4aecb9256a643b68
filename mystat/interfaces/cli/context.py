"""Shared helpers for composing CLI command contexts.

The top-level group stores a :class:`CLIContext` on ``ctx.obj``; commands
use it to build a configured :class:`MystatClient` and to print results.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import click
from rich.console import Console

from mystat.app.config import ClientSettings
from mystat.domain.models import Credential, Result
from mystat.services.portal import MystatClient

console = Console()

ClientFactory = Callable[[Credential, ClientSettings], MystatClient]
ClientCall = Callable[[MystatClient], Awaitable[Result[Any]]]


def default_client_factory(credential: Credential, settings: ClientSettings) -> MystatClient:
    return MystatClient(credential, settings=settings)


@dataclass
class CLIContext:
    """Container for CLI configuration and the client factory."""

    settings: ClientSettings
    username: str
    password: str | None = None
    client_factory: ClientFactory = default_client_factory

    def credential(self) -> Credential:
        if not self.password:
            self.password = click.prompt("MyStat password", hide_input=True)
        return Credential(self.username, self.password)

    def build_client(self) -> MystatClient:
        return self.client_factory(self.credential(), self.settings)


def run_call(ctx: click.Context, call: ClientCall) -> Any:
    """Run ``call`` against a fresh client and print its JSON payload.

    Exits with status 1 when the call returns a failure.
    """
    cli_context: CLIContext = ctx.obj["cli_context"]
    client = cli_context.build_client()

    async def _run() -> Result[Any]:
        async with client:
            return await call(client)

    result = asyncio.run(_run())
    if not result.ok:
        console.print(str(result), style="red", markup=False)
        ctx.exit(1)
    console.print_json(data=result.data)
    return result.data

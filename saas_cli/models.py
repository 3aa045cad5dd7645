"""
Typed models for backends, their operations, and resolved commands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import TypeAdapter

from saas_cli.config import ConnectionContext
from saas_cli.schemas import ParamsModel

DRY_RUN_MESSAGE = "Add --confirm to execute. Planned action:"


@dataclass(frozen=True)
class Operation:
    """One remote call (or fixed sequence of calls) a backend supports."""

    tag: str
    run: Callable[[ConnectionContext, Any], Any]
    synopsis: str = ""
    summary: str = ""
    positionals: tuple[str, ...] = ()
    greedy: bool = False
    scopes: tuple[str, ...] = ("basic",)
    mutating: bool = False
    # Builds the wire body from the record; the dry-run plan shows the same body.
    request_body: Callable[[Any], dict] | None = None


@dataclass(frozen=True)
class Backend:
    name: str
    prog: str
    schema: TypeAdapter
    operations: dict[str, Operation]
    load_context: Callable[..., ConnectionContext]
    env_help: str
    base_scopes: tuple[str, ...] = ("basic",)
    boolean_flags: frozenset[str] = field(default_factory=lambda: frozenset({"confirm"}))

    def help(self) -> dict:
        """Usage document printed by ``help``."""
        commands = []
        for op in self.operations.values():
            commands.append(f"{(op.synopsis or op.tag).ljust(44)} - {op.summary}")
        return {
            "usage": f"{self.prog} <command> [--flag value ...] [--confirm]",
            "commands": commands,
            "env": self.env_help,
        }


@dataclass(frozen=True)
class ShowUsage:
    backend: Backend


@dataclass(frozen=True)
class Command:
    """Operation + validated record + connection context, ready to run."""

    backend: Backend
    operation: Operation
    params: ParamsModel
    context: ConnectionContext
    confirm: bool = False

    def dry_run_plan(self) -> dict:
        if self.operation.request_body is not None:
            body = self.operation.request_body(self.params)
        else:
            body = self.params.as_params()
        return {
            "_dryRun": True,
            "_message": DRY_RUN_MESSAGE,
            "action": self.operation.tag,
            **body,
        }

"""
Command dispatch: turn positional tokens + a flags map + an environment
snapshot into a fully validated Command, then run it.

The flags map is untyped input; it stops here. Everything handed to an
operation is a validated parameter record.
"""

from saas_cli.exceptions import UnknownCommandError
from saas_cli.models import Command, ShowUsage
from saas_cli.schemas import validate_params

HELP_TOKENS = {"help", "--help", "-h"}

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _truthy(value):
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def select_operation(backend, positionals):
    """Match ``sub cmd`` (as ``sub.cmd``) first, then ``sub`` alone.

    Returns (operation or None, remaining tokens).
    """
    ops = backend.operations
    if len(positionals) >= 2 and f"{positionals[0]}.{positionals[1]}" in ops:
        return ops[f"{positionals[0]}.{positionals[1]}"], positionals[2:]
    if positionals[0] in ops:
        return ops[positionals[0]], positionals[1:]
    return None, positionals[1:]


def build_raw(operation, rest, flags):
    """Assemble the loosely typed map handed to the argument schema.

    Positional tokens fill the operation's positional fields that no flag
    supplied, in order; with ``greedy`` the last one takes every leftover
    token joined by spaces.
    """
    raw = {
        key: value
        for key, value in flags.items()
        if key not in ("confirm", "help") and value is not None
    }
    open_fields = [name for name in operation.positionals if name not in raw]
    tokens = list(rest)
    for i, name in enumerate(open_fields):
        if not tokens:
            break
        if operation.greedy and i == len(open_fields) - 1:
            raw[name] = " ".join(tokens)
            tokens = []
        else:
            raw[name] = tokens.pop(0)
    raw["kind"] = operation.tag
    return raw


def resolve(backend, positionals, flags, env):
    """Return ShowUsage or a ready-to-run Command.

    Credentials are checked before arguments, and both before any network
    activity.
    """
    if not positionals or positionals[0] in HELP_TOKENS or _truthy(flags.get("help")):
        return ShowUsage(backend)

    operation, rest = select_operation(backend, positionals)
    if operation is None:
        backend.load_context(env, backend.base_scopes)
        attempted = " ".join(positionals[:2])
        raise UnknownCommandError(
            f"[ERROR] Unknown command: {attempted}. Use 'help' for usage."
        )

    context = backend.load_context(env, operation.scopes)
    record = validate_params(backend.schema, build_raw(operation, rest, flags)).unwrap(
        operation.tag
    )
    return Command(
        backend=backend,
        operation=operation,
        params=record,
        context=context,
        confirm=_truthy(flags.get("confirm", False)),
    )


def execute(command):
    """Run a resolved command. Unconfirmed mutations only describe themselves."""
    if command.operation.mutating and not command.confirm:
        return command.dry_run_plan()
    return command.operation.run(command.context, command.params)


def run(backend, positionals, flags, env):
    resolved = resolve(backend, positionals, flags, env)
    if isinstance(resolved, ShowUsage):
        return resolved.backend.help()
    return execute(resolved)

"""
saas-cli: command-line entry points for the wiki, tracker and messaging clients
"""

import sys

from saas_cli import config, dispatch, messaging, tracker, wiki
from saas_cli.exceptions import CliError
from saas_cli.formatters import emit_error, output

# ---------------------------------------------------------------------------
# Global flag extraction (before operation flags, so they work anywhere)
# ---------------------------------------------------------------------------


def _takes_value(arg, boolean_flags):
    if not arg.startswith("--") or len(arg) <= 2 or "=" in arg:
        return False
    name = arg[2:].replace("-", "_")
    if name in boolean_flags or name == "help" or name in ("verbose", "version"):
        return False
    return not (name.startswith("no_") and name[3:] in boolean_flags)


def _extract_global_flags(argv, prog, boolean_flags=frozenset()):
    """Extract global flags from argv regardless of position.

    Stops at ``--``, and the token after a value-taking flag is that
    flag's value, never a global flag.
    Returns (verbose, remaining_argv). Handles --version directly.
    """
    verbose = False
    remaining = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            remaining.extend(argv[i:])
            break
        if arg == "--version":
            print(f"{prog} {config.VERSION}")
            sys.exit(0)
        elif arg in ("--verbose", "-v"):
            verbose = True
        else:
            remaining.append(arg)
            if _takes_value(arg, boolean_flags) and i + 1 < len(argv):
                nxt = argv[i + 1]
                if not nxt.startswith("--"):
                    remaining.append(nxt)
                    i += 1
        i += 1
    return verbose, remaining


# ---------------------------------------------------------------------------
# Operation flag parsing
# ---------------------------------------------------------------------------


def parse_flags(argv, boolean_flags=frozenset()):
    """Split argv into positional tokens and an untyped flags map.

    ``--key value`` and ``--key=value`` set a string; a boolean flag (or a
    flag with no value after it) is ``True``; ``--no-<flag>`` is ``False``
    for boolean flags. Dashes in flag names become underscores.
    Everything after ``--`` is positional.
    """
    positionals = []
    flags = {}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == "--":
            positionals.extend(argv[i + 1 :])
            break
        if arg == "-h":
            flags["help"] = True
        elif arg.startswith("--") and len(arg) > 2:
            name, eq, value = arg[2:].partition("=")
            name = name.replace("-", "_")
            if eq:
                flags[name] = value
            elif name in boolean_flags or name == "help":
                flags[name] = True
            elif name.startswith("no_") and name[3:] in boolean_flags:
                flags[name[3:]] = False
            elif i + 1 < len(argv) and not argv[i + 1].startswith("--"):
                flags[name] = argv[i + 1]
                i += 1
            else:
                flags[name] = True
        else:
            positionals.append(arg)
        i += 1
    return positionals, flags


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def main(backend, argv=None, environ=None):
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    argv = sys.argv[1:] if argv is None else argv
    verbose = False
    try:
        verbose, remaining = _extract_global_flags(argv, backend.prog, backend.boolean_flags)
        if verbose:
            config.HTTP_LOG_ENABLED = True
        positionals, flags = parse_flags(remaining, backend.boolean_flags)
        result = dispatch.run(backend, positionals, flags, config.env_snapshot(environ))
    except CliError as e:
        emit_error(e, verbose)
        sys.exit(e.exit_code)
    output(result)


def wiki_main():
    main(wiki.BACKEND)


def tracker_main():
    main(tracker.BACKEND)


def messaging_main():
    main(messaging.BACKEND)

"""Output helpers: one compact JSON document per successful invocation."""

import json
import sys
import traceback


def to_json(data):
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def output(data):
    print(to_json(data))


def emit_error(err, verbose=False):
    """Print a failure to stderr, with its traceback when verbose."""
    print(str(err), file=sys.stderr)
    if verbose:
        traceback.print_exception(type(err), err, err.__traceback__, file=sys.stderr)

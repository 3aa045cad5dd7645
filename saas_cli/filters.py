"""
Client-side post-filters applied to already validated responses.

These helpers have no side effects and never mutate their input.
"""

import copy


def mention_marker(user_id):
    return f"<@{user_id}>"


def filter_mentions(result, user_id):
    """Keep only search matches whose text literally mentions ``user_id``.

    Everything outside ``messages.matches`` (totals, paging) is left as
    the API reported it.
    """
    marker = mention_marker(user_id)
    out = copy.deepcopy(result)
    matches = out["messages"]["matches"]
    out["messages"]["matches"] = [m for m in matches if marker in (m.get("text") or "")]
    return out


def _parse_ts(ts):
    """Parse a messaging timestamp ("1700000000.000100") into a float."""
    try:
        return float(ts)
    except (TypeError, ValueError):
        return None


def in_time_window(ts, oldest=None, latest=None, inclusive=False):
    value = _parse_ts(ts)
    if value is None:
        return False
    low = _parse_ts(oldest)
    high = _parse_ts(latest)
    if low is not None and (value < low or (value == low and not inclusive)):
        return False
    if high is not None and (value > high or (value == high and not inclusive)):
        return False
    return True


def filter_time_window(messages, oldest=None, latest=None, inclusive=False):
    """Return the messages whose ``ts`` lies inside [oldest, latest]."""
    if oldest is None and latest is None:
        return list(messages)
    return [m for m in messages if in_time_window(m.get("ts"), oldest, latest, inclusive)]


def mentioning(messages, user_id):
    marker = mention_marker(user_id)
    return [m for m in messages if marker in (m.get("text") or "")]

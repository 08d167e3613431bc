from datetime import datetime, timezone

# -------------------------
# Time helpers
# -------------------------

def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_iso_maybe(ts: str):
    """Parse ISO timestamp string (optionally Z) to a UTC datetime. Returns None if invalid."""
    if not ts or not isinstance(ts, str):
        return None
    try:
        if ts.endswith("Z"):
            ts = ts[:-1] + "+00:00"
        dt = datetime.fromisoformat(ts)
    except ValueError:
        return None
    # Naive timestamps from the API are UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_ts_iso(dt: datetime) -> str:
    """Render a timestamp as ISO-8601 UTC with seconds precision: 2024-01-01T00:00:00Z."""
    dt = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


# -------------------------
# Display formatting (output only)
# -------------------------

def format_coins(copper: int) -> str:
    """
    Return a copper amount in gold/silver/copper notation.

      0      -> 0c
      150    -> 1s 50c
      10050  -> 1g 0s 50c

    Leading zero denominations are dropped; once a higher one is shown,
    every lower one is shown too.
    """
    n = int(copper)
    if n < 0:
        raise ValueError(f"coin amount must not be negative: {n}")

    gold, rest = divmod(n, 10000)
    silver, cop = divmod(rest, 100)

    parts = []
    if gold:
        parts.append(f"{gold}g")
    if gold or silver:
        parts.append(f"{silver}s")
    parts.append(f"{cop}c")
    return " ".join(parts)


def format_names(names) -> str:
    """Return names as an English enumeration: A, B, and C."""
    names = [str(n) for n in names]
    if not names:
        return "None"
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return ", ".join(names[:-1]) + ", and " + names[-1]

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any
import urllib.request
import urllib.error


DEFAULT_BASE_URL = os.getenv("HUB_BASE_URL", "http://localhost:8000")
DEFAULT_ADMIN_KEY = os.getenv("INTERNAL_ADMIN_KEY", "")

DEFAULT_TIMEOUT_SECONDS = 30


def http_post(url: str, payload: dict[str, Any], admin_key: str) -> dict[str, Any]:
    data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(
        url=url,
        data=data,
        method="POST",
        headers={
            "Content-Type": "application/json",
            "X-Internal-Admin-Key": admin_key,
        },
    )
    try:
        with urllib.request.urlopen(req, timeout=DEFAULT_TIMEOUT_SECONDS) as resp:
            raw = resp.read().decode("utf-8")
            return json.loads(raw) if raw else {}
    except urllib.error.HTTPError as e:
        body = e.read().decode("utf-8", errors="replace")
        print(f"HTTP {e.code} {e.reason} for {url}", file=sys.stderr)
        if body:
            print(body, file=sys.stderr)
        return {"error": {"status": e.code, "reason": e.reason, "body": body}}
    except urllib.error.URLError as e:
        print(f"Network error for {url}: {e}", file=sys.stderr)
        return {"error": {"reason": str(e)}}


def validate_payload(body: Any) -> str | None:
    """Return an error message, or None when the file looks importable."""
    if not isinstance(body, dict):
        return "expected a JSON object with 'states' and/or 'municipalities' lists"
    if "states" not in body and "municipalities" not in body:
        return "expected a JSON object with 'states' and/or 'municipalities' lists"

    for key, required in (("states", ("id", "name")), ("municipalities", ("id", "state_id", "name"))):
        items = body.get(key, [])
        if not isinstance(items, list):
            return f"'{key}' must be a list"
        for i, item in enumerate(items):
            if not isinstance(item, dict) or any(k not in item for k in required):
                return f"{key}[{i}] must have fields {', '.join(required)}"
    return None


def main() -> int:
    p = argparse.ArgumentParser(description="Load states and municipalities into the location catalog.")
    p.add_argument("--file", required=True, help="path to json file")
    p.add_argument("--base-url", default=DEFAULT_BASE_URL)
    p.add_argument("--admin-key", default=DEFAULT_ADMIN_KEY)
    p.add_argument("--dry-run", action="store_true", help="validate the file and print counts only")
    args = p.parse_args()

    try:
        with open(args.file, "r", encoding="utf-8") as f:
            body = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Failed to read JSON file: {e}", file=sys.stderr)
        return 2

    problem = validate_payload(body)
    if problem:
        print(f"Invalid payload: {problem}", file=sys.stderr)
        return 2

    if args.dry_run:
        counts = {"states": len(body.get("states", [])), "municipalities": len(body.get("municipalities", []))}
        print(json.dumps(counts, indent=2))
        return 0

    if not args.admin_key:
        print("Missing INTERNAL_ADMIN_KEY (env) or --admin-key", file=sys.stderr)
        return 2

    endpoint = f"{args.base_url.rstrip('/')}/v1/internal/geo"
    resp = http_post(endpoint, body, args.admin_key)
    print(json.dumps(resp, indent=2, ensure_ascii=False))
    return 0 if "error" not in resp else 1


if __name__ == "__main__":
    raise SystemExit(main())

from __future__ import annotations

import argparse
import json
import time
import urllib.error
import urllib.request

DEMO_SCENE = {
    "width": 400,
    "height": 300,
    "elements": [
        {
            "id": "source",
            "x": 20,
            "y": 20,
            "width": 120,
            "height": 60,
            "relations": [
                {"targetId": "target", "sourceAnchor": "right", "targetAnchor": "left"},
            ],
        },
        {"id": "target", "x": 240, "y": 160, "width": 120, "height": 60},
    ],
}


def fetch(url: str, payload: dict | None = None) -> tuple[int, bytes]:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    req = urllib.request.Request(url, data=data)
    if data is not None:
        req.add_header("Content-Type", "application/json")
    with urllib.request.urlopen(req, timeout=10) as resp:
        return resp.status, resp.read()


def wait_for(url: str, timeout: int) -> bytes:
    deadline = time.time() + timeout
    last_error: Exception | None = None
    while time.time() < deadline:
        try:
            status, body = fetch(url)
            if status == 200:
                return body
        except (urllib.error.URLError, OSError) as exc:
            last_error = exc
        time.sleep(1)
    raise RuntimeError(f"Timed out waiting for {url}: {last_error}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test for a running arrow API.")
    parser.add_argument("--base-url", default="http://localhost:8080")
    parser.add_argument("--timeout", type=int, default=60)
    args = parser.parse_args()

    base_url = args.base_url.rstrip("/")

    wait_for(f"{base_url}/health", args.timeout)

    _, body = fetch(f"{base_url}/api/arrows", DEMO_SCENE)
    arrows = json.loads(body.decode("utf-8")).get("arrows", [])
    if len(arrows) != 1:
        raise RuntimeError(f"Expected one arrow, got {len(arrows)}")
    if not arrows[0].get("d", "").startswith("M140,50 C"):
        raise RuntimeError(f"Unexpected path: {arrows[0].get('d')}")

    status, svg = fetch(f"{base_url}/api/svg", DEMO_SCENE)
    if status != 200 or b"<path" not in svg:
        raise RuntimeError("SVG endpoint did not return a path")

    print("Smoke test passed.")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Send actions to a running browser interaction driver.

Reads the server address from .env files and posts one action (or a list of
actions) to the driver's /actions endpoint.

Usage:
    python invoke_action.py --action '{"type": "new_page", "url": "http://localhost:8001/"}'
    python invoke_action.py --env .env.local --action '{"type": "fill_text", "selector": "#name", "text": "Ada"}'
    python invoke_action.py --file actions.json
"""
import argparse
import json
import os
import sys
from pathlib import Path

import httpx
from dotenv import load_dotenv


def build_payload(action_json: str | None = None, action_file: str | None = None) -> dict:
    """Build the request body from an inline JSON action or a JSON file."""
    if action_file:
        raw = Path(action_file).read_text(encoding="utf-8")
    elif action_json:
        raw = action_json
    else:
        raise ValueError("Provide --action or --file")

    action = json.loads(raw)
    if isinstance(action, dict) and "action" in action:
        return action
    return {"action": action}


def invoke_driver(base_url: str, payload: dict, timeout: float = 120.0) -> dict:
    """Post the payload and return the driver envelope."""
    with httpx.Client(base_url=base_url, timeout=timeout) as client:
        response = client.post("/actions", json=payload)
        response.raise_for_status()
        return response.json()


def print_envelope(envelope: dict) -> None:
    status = envelope.get("status", "unknown")
    marker = "✓" if status == "success" else "✗"
    code = f" [{envelope['code']}]" if envelope.get("code") else ""
    print(f"{marker} {status}{code}")
    for item in envelope.get("content", []):
        if "text" in item:
            print(f"  {item['text']}")
        if "json" in item:
            print("  " + json.dumps(item["json"], indent=2).replace("\n", "\n  "))


def main():
    parser = argparse.ArgumentParser(description="Invoke the browser interaction driver")
    parser.add_argument("--env", default=".env", help="Path to .env file (default: .env)")
    parser.add_argument("--url", help="Driver base URL (default: BROWSER_DRIVER_URL or http://localhost:8270)")
    parser.add_argument("--action", help="Action JSON object or list")
    parser.add_argument("--file", help="Path to a JSON file holding the action(s)")
    parser.add_argument("--timeout", type=float, default=120.0, help="Request timeout in seconds")
    args = parser.parse_args()

    env_path = Path(args.env)
    if env_path.exists():
        load_dotenv(env_path)
        print(f"Loaded config from: {env_path}")

    base_url = args.url or os.getenv("BROWSER_DRIVER_URL", "http://localhost:8270")

    try:
        payload = build_payload(args.action, args.file)
    except (ValueError, json.JSONDecodeError) as e:
        print(f"Error: {e}")
        sys.exit(2)

    try:
        envelope = invoke_driver(base_url, payload, timeout=args.timeout)
    except httpx.HTTPError as e:
        print(f"Error: request to {base_url} failed: {e}")
        sys.exit(1)

    print_envelope(envelope)
    sys.exit(0 if envelope.get("status") == "success" else 1)


if __name__ == "__main__":
    main()

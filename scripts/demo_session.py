#!/usr/bin/env python3
"""Demo script driving an editor view through the Codepad HTTP service."""

import argparse
import sys

import requests


def _print_state(state: dict) -> None:
    execution = state["execution"]
    print(f"  Phase: {execution['phase']} ({execution['progress']}%) {execution['status']}")
    if execution["error"]:
        print(f"  Error: {execution['error']}")
    for line in execution["output"] or []:
        marker = "!" if line["type"] == "error" else " "
        print(f"  {marker}{line['line']:>3}  {line['content']}")


def main():
    """Open a project, edit it, save it and run it."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default="http://localhost:8000")
    parser.add_argument("--project", default="demo")
    args = parser.parse_args()

    base = args.url.rstrip("/")
    editor_url = f"{base}/editors/{args.project}"

    try:
        response = requests.get(f"{base}/health", timeout=5)
        response.raise_for_status()
        print("SUCCESS: Codepad server is running")
    except requests.exceptions.RequestException:
        print("ERROR: Cannot connect to Codepad server. Start it with: invoke dev")
        sys.exit(1)

    try:
        opened = requests.post(editor_url, timeout=30).json()
        if not opened["ok"]:
            print(f"ERROR: Could not open project: {opened['error']}")
            sys.exit(1)
        project = opened["state"]["project"]
        print(f"Opened {project['name']} ({project['language']} {project['version']})")

        code = "print('Hello from Codepad')\nprint('second line')\n"
        requests.put(f"{editor_url}/buffer", json={"text": code}, timeout=30)

        print("\nSaving with Ctrl+S...")
        saved = requests.post(
            f"{editor_url}/keys", json={"key": "s", "ctrl": True}, timeout=30
        ).json()
        print(f"  Notification: {saved['state']['notifications'][-1]['message']}")

        print("\nRunning project...")
        # No timeout: the execution service call has none either.
        ran = requests.post(f"{editor_url}/run", timeout=None).json()
        _print_state(ran["state"])

        print("\nRunning selection...")
        requests.put(f"{editor_url}/selection", json={"text": "print('just this')"}, timeout=30)
        ran = requests.post(f"{editor_url}/run-selection", timeout=None).json()
        _print_state(ran["state"])

        requests.delete(editor_url, timeout=30)
        print("\nDemo completed!")

    except requests.exceptions.RequestException as e:
        print(f"ERROR: Request failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

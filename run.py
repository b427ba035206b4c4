#!/usr/bin/env python3
"""
Tracking Page Inspector - Main Runner

Usage:
    python3 run.py [URL]                    # Fetch URL and print extracted flight data
    python3 run.py --html FILE [--base URL] # Extract from a saved page
    python3 run.py --url-only URL           # Parse the URL path only (no network)
    python3 run.py --config FILE [URL]      # Use timeout/window from a config file
    python3 run.py --verbose [URL]          # Show debug logging
"""

import json
import logging
import sys
from pathlib import Path

from trackpage.config import load_config
from trackpage.extractor import extract_from_html, fetch_and_extract
from trackpage.tracking_url import extract_from_url_pattern

DEFAULT_URL = "https://www.flightaware.com/live/flight/NOK531/history/20260212/1130Z/VTSP/VTBD"

USAGE = """
Tracking Page Inspector

Usage:
    python3 run.py [URL]                    Fetch URL and print extracted flight data
    python3 run.py --html FILE [--base URL] Extract from a saved HTML page
    python3 run.py --url-only URL           Parse the tracking URL path only
    python3 run.py --config FILE [URL]      Load settings from a JSON config file
    python3 run.py --verbose [URL]          Show debug logging
    python3 run.py --help                   Show this help
"""


def _option_value(args, *names):
    """Pop `--name VALUE` from args. Returns VALUE or None."""
    for name in names:
        if name in args:
            index = args.index(name)
            if index + 1 >= len(args):
                raise ValueError(f"{name} needs a value")
            value = args[index + 1]
            del args[index:index + 2]
            return value
    return None


def _pop_flag(args, *names):
    found = False
    for name in names:
        while name in args:
            args.remove(name)
            found = True
    return found


def run(args):
    """Run one inspection and return the JSON-ready result dict."""
    config_file = _option_value(args, "--config", "-c")
    html_file = _option_value(args, "--html")
    base_url = _option_value(args, "--base")
    url_only = _pop_flag(args, "--url-only", "-u")

    config = load_config(config_file)

    if html_file:
        html = Path(html_file).read_text(encoding="utf-8", errors="ignore")
        extracted = extract_from_html(html, base_url=base_url, label_window=config["label_window"])
        source = base_url or html_file
    else:
        source = args[0] if args else DEFAULT_URL
        if url_only:
            extracted = extract_from_url_pattern(source)
        else:
            extracted = fetch_and_extract(
                source,
                timeout=config["fetch_timeout"],
                label_window=config["label_window"],
                user_agent=config["user_agent"],
            )

    return {
        "url": source,
        "extracted": extracted.to_dict() if extracted is not None else None,
    }


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    if "--help" in args or "-h" in args:
        print(USAGE)
        return 0

    if _pop_flag(args, "--verbose", "-v"):
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        result = run(args)
    except Exception as e:
        print(f"Failed to extract tracking data: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

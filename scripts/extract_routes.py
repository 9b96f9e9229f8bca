#!/usr/bin/env python3
"""
Report which route handlers can be extracted from a monolithic route file.

Usage:
    python scripts/extract_routes.py src/index.tsx
"""

import os
import sys

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.route_extractor import DEFAULT_PATTERNS, extract_routes


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Please provide the route file path as an argument")
        return 1

    try:
        with open(argv[0], "r", encoding="utf-8") as f:
            source = f.read()
    except OSError as e:
        print(f"❌ Could not read {argv[0]}: {e}")
        return 1

    matches = extract_routes(source, DEFAULT_PATTERNS)
    for pattern in DEFAULT_PATTERNS:
        block = matches.get(pattern.name)
        if block:
            print(f"Found {pattern.name}: {block[:50]}... → {pattern.target}")
        else:
            print(f"No match for {pattern.name}")

    print(f"Extraction complete. Found {len(matches)} routes")
    return 0


if __name__ == "__main__":
    sys.exit(main())

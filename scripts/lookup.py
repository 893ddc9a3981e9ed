"""Classify order IDs or transaction hashes from the command line."""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

import chatbot
import classifier


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Guess which partner issued an order ID")
    parser.add_argument("identifiers", nargs="+", help="Order IDs or transaction hashes to classify")
    parser.add_argument("--text", action="store_true", help="Print the plain-text chat reply instead of JSON")
    args = parser.parse_args(argv)

    status = 0
    for identifier in args.identifiers:
        try:
            result = classifier.classify(identifier)
        except classifier.EmptyInputError as exc:
            print(f"{exc} (got {identifier!r})", file=sys.stderr)
            status = 2
            continue

        if args.text:
            print(chatbot.format_plain(result))
        else:
            print(json.dumps(result.to_json_dict(), indent=2))
    return status


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Generate a sample property submission payload.

Fills an empty record with seeded sample data, runs the submission checks
and writes the payload to stdout (or a file) as JSON. Useful for manual
testing against a backend.
"""

import argparse
import json
import random
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from property_editor.config import EditorConfig
from property_editor.logging import get_logger, setup_logging
from property_editor.models import Organization
from property_editor.normalize import to_payload
from property_editor.store import RecordStore
from property_editor.validation import validate_submission

logger = get_logger("generate_sample_property")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a sample property payload")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--organization",
        action="append",
        default=[],
        help="Organization display code to pick from (repeatable)",
    )
    parser.add_argument("--output", type=Path, help="Write payload to this file")
    parser.add_argument("--log-level", default=None, help="Log level (default from LOG_LEVEL)")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    config = EditorConfig.from_env()
    setup_logging(args.log_level or config.log_level, stream=sys.stderr)

    organizations = [Organization(id=code, display_code=code) for code in args.organization]
    store = RecordStore()
    changed = store.fill_defaults(
        rng=random.Random(args.seed), organizations=organizations, locale=config.locale
    )
    logger.info("Filled fields: %s", ", ".join(changed))

    violations = validate_submission(store.record)
    for violation in violations:
        logger.warning("Sample record is not submittable yet: %s", violation)

    payload = json.dumps(to_payload(store.record), indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(payload + "\n", encoding="utf-8")
        print(f"Saved payload to {args.output}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Seed the service catalog and the pricing knowledge base.

Usage:
  python3 scripts/seed_data.py
  python3 scripts/seed_data.py --tenant-id <tenant id>
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from autodetail.infrastructure.knowledge.pricing_seed import PRICING_KNOWLEDGE_SEED  # noqa: E402
from autodetail.infrastructure.knowledge.service_seed import SERVICE_SEED  # noqa: E402
from autodetail.wiring.dependencies import build_container, get_embedder, get_notifier, get_store  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed services and pricing knowledge.")
    parser.add_argument("--tenant-id", default=None, help="scope the seeded services to a tenant")
    parser.add_argument("--skip-knowledge", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    container = build_container(store=get_store(), notifier=get_notifier(), embedder=get_embedder())

    added = container.catalog.seed(SERVICE_SEED, tenant_id=args.tenant_id)
    print(f"Services added: {added} (catalog holds {len(SERVICE_SEED)} seed entries)")

    if not args.skip_knowledge:
        if container.knowledge.has_items():
            print("Pricing knowledge already present, skipping")
        else:
            count = container.knowledge.seed(PRICING_KNOWLEDGE_SEED)
            print(f"Pricing knowledge items added: {count}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python
"""
Seed roles and permissions.

Usage:
    python scripts/seed.py                 # protected roles in every guard
    python scripts/seed.py --scenario demo # plus demo permissions and roles
"""

import argparse
import asyncio
import sys

import structlog


# Add src to path for imports
sys.path.insert(0, "src")

from permissions_manager.config import get_settings
from permissions_manager.core.cache import get_registrar
from permissions_manager.core.database import close_engine, get_session_factory
from permissions_manager.core.logging import configure_logging
from permissions_manager.core.permissions.seeding import (
    SeedResult,
    ensure_protected_roles,
    seed_demo,
)


logger = structlog.get_logger()

SCENARIOS = {
    "default": ensure_protected_roles,
    "demo": seed_demo,
}


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    settings = get_settings()
    configure_logging(settings)

    seed = SCENARIOS.get(scenario)
    if seed is None:
        print(f"Unknown scenario: {scenario}")
        print(f"Available scenarios: {', '.join(SCENARIOS)}")
        sys.exit(1)

    try:
        async with get_session_factory()() as session:
            result: SeedResult = await seed(session, get_registrar(), settings)
    finally:
        await close_engine()

    for role in result.roles:
        print(f"Created role: {role}")
    for permission in result.permissions:
        print(f"Created permission: {permission}")
    if not result.roles and not result.permissions:
        print("Nothing to seed, everything already exists")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed roles and permissions")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))

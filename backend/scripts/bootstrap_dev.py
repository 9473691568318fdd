"""
Dev bootstrap script — issue an API key for a contractor or a worker.

Usage (from backend/):
    python -m scripts.bootstrap_dev contractor c-100
    python -m scripts.bootstrap_dev worker w-200

The subject id is the one the external directories use; the key resolves
to that id and role on every request. The raw key is printed ONCE and is
never stored, so copy it immediately.
"""

import argparse
import asyncio
import logging

from app.auth.hashing import display_prefix, generate_api_key
from app.core.database import async_session_factory, engine
from app.models.api_key import APIKey, Role
import app.models.application  # noqa: F401  (registers Project.workers target)

logger = logging.getLogger(__name__)


async def issue_key(subject_id: str, role: Role) -> str:
    """Persist a new key for subject_id and return the raw key."""
    raw_key, key_hash = generate_api_key()

    async with async_session_factory() as session:
        session.add(
            APIKey(
                subject_id=subject_id,
                role=role.value,
                key_hash=key_hash,
                prefix=display_prefix(raw_key),
            )
        )
        await session.commit()

    logger.info("Issued %s key %s for %s", role.value, display_prefix(raw_key), subject_id)
    return raw_key


async def main(subject_id: str, role: Role) -> None:
    try:
        raw_key = await issue_key(subject_id, role)
    finally:
        await engine.dispose()

    print()
    print("=" * 60)
    print("  Dev Bootstrap Complete")
    print("=" * 60)
    print()
    print(f"  Subject:    {subject_id}")
    print(f"  Role:       {role.value}")
    print()
    print(f"  API Key:    {raw_key}")
    print()
    print("  ⚠  Copy this key now — it will NEVER be shown again.")
    print("=" * 60)
    print()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Issue a marketplace API key.")
    parser.add_argument("role", choices=[role.value for role in Role])
    parser.add_argument("subject_id", help="Contractor or worker id")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)-8s | %(message)s")
    asyncio.run(main(args.subject_id, Role(args.role)))

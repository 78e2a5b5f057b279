"""
Seed script for the Vita mock DB or Firestore.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Force mock DB even if FIREBASE configured: python scripts/seed_db.py --apply --force-mock

Behavior:
  - Loads `db_seed.json` from repo root (collection -> document id -> document).
  - Resource contact/metadata may be written as plain objects in the seed;
    they are stored as JSON strings like every other resource write.
  - Timestamps are set at seeding time.

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` and
`USE_MOCK_DB=false` are set in `.env`.
"""

import argparse
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from app.config.firebase import get_db
from app.core.settings import settings
from app.services.alert_service import ALERTS_COLLECTION
from app.services.resource_service import RESOURCES_COLLECTION
from app.utils.firestore_helpers import dump_blob

logger = logging.getLogger("seed_db")

BLOB_FIELDS = ("contact", "metadata")


def load_seed(path: str = "./db_seed.json") -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def prepare_document(collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
    document = dict(data)
    now = datetime.now(timezone.utc)
    document.setdefault("created_at", now)

    if collection == RESOURCES_COLLECTION:
        for field in BLOB_FIELDS:
            if not isinstance(document.get(field), str):
                document[field] = dump_blob(document.get(field))
        document.setdefault("verification_level", "UNVERIFIED")
        document.setdefault("report_count", 0)
        document.setdefault("upvote_count", 0)
        document.setdefault("last_updated", now)

    if collection == ALERTS_COLLECTION:
        document.setdefault("expires_at", now + timedelta(hours=settings.ALERT_TTL_HOURS))

    return document


def write_to_db(db: Any, seed: dict, apply: bool = False) -> int:
    written = 0
    for collection, docs in seed.items():
        for doc_id, data in docs.items():
            logger.info(f"Preparing: {collection}/{doc_id}")
            if not apply:
                continue
            try:
                db.collection(collection).document(doc_id).set(prepare_document(collection, data))
                written += 1
            except Exception as e:
                logger.error(f"Failed to write {collection}/{doc_id}: {e}")
    return written


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Force use of mock DB even if FIREBASE configured")
    parser.add_argument("--seed", default=os.path.join(os.getcwd(), "db_seed.json"), help="Path to the seed file")
    args = parser.parse_args()

    if not os.path.exists(args.seed):
        logger.error(f"Seed file not found: {args.seed}")
        return

    seed = load_seed(args.seed)

    if args.force_mock:
        logger.info("Forcing mock DB usage for this run.")
        settings.USE_MOCK_DB = True

    written = write_to_db(get_db(), seed, apply=args.apply)

    if args.apply:
        logger.info(f"Seeding completed: {written} documents written.")
    else:
        logger.info("Dry run complete. Re-run with --apply to write to DB.")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Index setup script for the patient interchange collections.

This script:
1. Lists the current indexes on ``patients`` and ``consultations``
2. Creates the unique (owner_id, name_key) dedup index and the lookup indexes
3. Reports (owner_id, name_key) duplicates that would block the unique index

Usage:
    python scripts/setup_interchange_indexes.py --analyze
    python scripts/setup_interchange_indexes.py --find-duplicates
    python scripts/setup_interchange_indexes.py --create-indexes
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List

# Add the src directory to the Python path
sys.path.insert(0, "src")

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import OperationFailure

from vitalscribe.core.config import get_settings

INDEX_SPECS: Dict[str, List[Dict[str, Any]]] = {
    "patients": [
        {
            "name": "owner_name_key_unique",
            "key": [("owner_id", ASCENDING), ("name_key", ASCENDING)],
            "unique": True,
        },
        {
            "name": "patient_id_unique",
            "key": [("patient_id", ASCENDING)],
            "unique": True,
        },
    ],
    "consultations": [
        {
            "name": "consultation_id_unique",
            "key": [("consultation_id", ASCENDING)],
            "unique": True,
        },
        {
            "name": "owner_patient_created",
            "key": [("owner_id", ASCENDING), ("patient_id", ASCENDING), ("created_at", DESCENDING)],
            "unique": False,
        },
    ],
}


class InterchangeIndexManager:
    """Creates and inspects the indexes the import/export path relies on."""

    def __init__(self):
        self.settings = get_settings()
        self.client = AsyncIOMotorClient(self.settings.database.uri)
        self.db = self.client[self.settings.database.db_name]

    async def analyze_current_indexes(self) -> None:
        """Print the current indexes of each collection."""
        for collection_name in INDEX_SPECS:
            indexes = await self.db[collection_name].list_indexes().to_list(None)
            count = await self.db[collection_name].count_documents({})
            print(f"📋 {collection_name}: {count:,} documents, {len(indexes)} indexes")
            for idx in indexes:
                print(f"   - {idx.get('name', 'unknown')}: {dict(idx.get('key', {}))}")

    async def find_duplicates(self) -> int:
        """Report (owner_id, name_key) groups holding more than one patient."""
        pipeline = [
            {"$group": {
                "_id": {"owner_id": "$owner_id", "name_key": "$name_key"},
                "count": {"$sum": 1},
                "patient_ids": {"$push": "$patient_id"},
            }},
            {"$match": {"count": {"$gt": 1}}},
        ]
        groups = await self.db["patients"].aggregate(pipeline).to_list(None)
        if not groups:
            print("✅ No duplicate (owner_id, name_key) pairs")
            return 0

        print(f"⚠️  {len(groups)} duplicate (owner_id, name_key) groups:")
        for group in groups:
            key = group["_id"]
            print(f"   - owner={key['owner_id']} name_key={key['name_key']!r}: {group['patient_ids']}")
        return len(groups)

    async def create_indexes(self) -> None:
        """Create every index in INDEX_SPECS."""
        print("🚀 Creating interchange indexes...")
        created = 0
        for collection_name, specs in INDEX_SPECS.items():
            for spec in specs:
                try:
                    result = await self.db[collection_name].create_index(
                        spec["key"], name=spec["name"], unique=spec["unique"]
                    )
                    created += 1
                    print(f"   ✅ {collection_name}.{result}")
                except OperationFailure as e:
                    print(f"   ❌ Error creating {collection_name}.{spec['name']}: {e}")

        print(f"\n✅ Index creation completed ({created} indexes)")

    async def close(self):
        """Close database connections."""
        self.client.close()


async def main():
    """Main function."""
    parser = argparse.ArgumentParser(description="Set up patient interchange indexes")
    parser.add_argument(
        "--analyze", action="store_true", help="List current indexes"
    )
    parser.add_argument(
        "--find-duplicates", action="store_true", help="Report duplicate dedup keys"
    )
    parser.add_argument(
        "--create-indexes", action="store_true", help="Create the interchange indexes"
    )

    args = parser.parse_args()

    if not any([args.analyze, args.find_duplicates, args.create_indexes]):
        parser.print_help()
        return

    manager = InterchangeIndexManager()

    try:
        if args.analyze:
            await manager.analyze_current_indexes()
        if args.find_duplicates:
            await manager.find_duplicates()
        if args.create_indexes:
            if await manager.find_duplicates():
                print("❌ Resolve duplicates before creating the unique index")
                return
            await manager.create_indexes()
    finally:
        await manager.close()


if __name__ == "__main__":
    asyncio.run(main())

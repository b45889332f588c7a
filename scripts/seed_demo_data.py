#!/usr/bin/env python3
"""Seed the configured storage backend with demo transformations and events.

Usage:
    python scripts/seed_demo_data.py
"""

import asyncio
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from sceneit_engine.common.config import get_settings
from sceneit_engine.common.security import hash_ip
from sceneit_engine.deps import create_storage_backend
from sceneit_engine.blobs.store import create_blob_store
from sceneit_engine.enhance.prompts import STYLE_PRESETS
from sceneit_engine.storage.schemas import EventCreate, TransformationCreate

SESSIONS = 25
SOURCES = [None, "google", "instagram", "newsletter"]
DEVICES = ["desktop", "mobile", "tablet"]


async def seed_demo_data() -> None:
    settings = get_settings()
    storage = create_storage_backend(settings, create_blob_store(settings))
    if not storage.enabled:
        print("Storage is disabled (SCENEIT_STORAGE_BACKEND=none); nothing to seed.")
        return
    await storage.init()

    rng = random.Random(42)
    now = datetime.now(timezone.utc)
    transformations = events = 0

    for i in range(SESSIONS):
        session_id = f"demo-session-{i:03d}"
        started = now - timedelta(days=rng.randint(0, 29), hours=rng.randint(0, 23))
        ip_hash = hash_ip(f"10.0.0.{i}")
        source = rng.choice(SOURCES)
        device = rng.choice(DEVICES)

        batch = [EventCreate(
            created_at=started,
            session_id=session_id,
            event_type="page_view",
            event_data={"utm_source": source} if source else {},
            ip_hash=ip_hash,
            device_type=device,
            screen_size="1440x900" if device == "desktop" else "390x844",
        )]

        if rng.random() < 0.7:
            style = rng.choice(STYLE_PRESETS)
            processing_ms = rng.randint(3000, 40000)
            batch.append(EventCreate(
                created_at=started + timedelta(seconds=20),
                session_id=session_id, event_type="upload_complete", ip_hash=ip_hash,
            ))
            batch.append(EventCreate(
                created_at=started + timedelta(seconds=25),
                session_id=session_id, event_type="enhance_start", ip_hash=ip_hash,
                event_data={"style_key": style.key},
            ))

            if rng.random() < 0.1:
                batch.append(EventCreate(
                    created_at=started + timedelta(seconds=30),
                    session_id=session_id, event_type="enhance_error", ip_hash=ip_hash,
                    event_data={"error": "Enhancement service unavailable. Check API key and quota."},
                ))
            else:
                opt_in = rng.random() < 0.6
                transformation_id = None
                if opt_in:
                    transformation_id = await storage.append_transformation(TransformationCreate(
                        created_at=started + timedelta(milliseconds=processing_ms),
                        session_id=session_id,
                        prompt_used=None,
                        style_key=style.key,
                        style_name=style.name,
                        processing_time_ms=processing_ms,
                        original_size_bytes=rng.randint(200_000, 4_000_000),
                        enhanced_size_bytes=rng.randint(500_000, 6_000_000),
                        opt_in=True,
                        ip_hash=ip_hash,
                    ))
                    transformations += 1
                batch.append(EventCreate(
                    created_at=started + timedelta(seconds=60),
                    session_id=session_id, event_type="enhance_complete", ip_hash=ip_hash,
                    transformation_id=transformation_id,
                    event_data={"processing_time_ms": processing_ms, "style_key": style.key},
                ))
                if rng.random() < 0.5:
                    batch.append(EventCreate(
                        created_at=started + timedelta(seconds=90),
                        session_id=session_id, event_type="download", ip_hash=ip_hash,
                        transformation_id=transformation_id,
                    ))

        await storage.append_events(batch)
        events += len(batch)

    await storage.close()
    print(f"Done. {transformations} transformations and {events} events seeded ({storage.name}).")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())

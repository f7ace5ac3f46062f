"""Generated demo tasks, used when no task feed is available."""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta, timezone

from .models import PRIORITIES, STATUS_DONE, STATUSES, Task

DEFAULT_SEED_COUNT = 50

_ACTIONS = [
    "Follow up with",
    "Prepare proposal for",
    "Demo call with",
    "Negotiate renewal with",
    "Onboard",
    "Quarterly review with",
    "Upsell add-ons to",
    "Send pricing to",
]

_CLIENTS = [
    "Acme Corp",
    "Globex",
    "Initech",
    "Umbrella Ltd",
    "Stark Industries",
    "Wayne Enterprises",
    "Hooli",
    "Vandelay Imports",
    "Soylent Co",
    "Tyrell Systems",
]

_NOTES = [
    "",
    "Decision maker is the CFO.",
    "Waiting on legal review.",
    "Asked for a discount on annual billing.",
    "Warm lead from the conference.",
]


def generate_sales_tasks(
    count: int = DEFAULT_SEED_COUNT,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> list[Task]:
    """Generate ``count`` plausible sales tasks.

    Pass a seeded ``rng`` to get the same batch every time.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if rng is None:
        rng = random.Random()

    tasks: list[Task] = []
    for _ in range(max(count, 0)):
        status = rng.choice(STATUSES)
        created_at = now - timedelta(days=rng.randint(1, 60), hours=rng.randint(0, 23))
        completed_at = None
        if status == STATUS_DONE:
            completed_at = created_at + timedelta(days=rng.randint(1, 14))
            if completed_at > now:
                completed_at = now
        tasks.append(
            Task(
                id=uuid.UUID(int=rng.getrandbits(128), version=4).hex,
                title=f"{rng.choice(_ACTIONS)} {rng.choice(_CLIENTS)}",
                revenue=float(rng.randrange(100, 20_000, 50)),
                time_taken=float(rng.randint(1, 40)),
                priority=rng.choice(PRIORITIES),
                status=status,
                notes=rng.choice(_NOTES),
                created_at=created_at,
                completed_at=completed_at,
            )
        )
    return tasks

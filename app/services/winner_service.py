import logging
import random
from datetime import datetime

from app.core.clock import utcnow
from app.core.exceptions import Conflict, NoEntries, NotEnded
from app.schemas.records import EntryRecord, GiveawayRecord, UserRecord, WinnerRecord
from app.services.giveaway_service import get_giveaway_or_raise
from app.services.serializers import giveaway_summary, user_summary, winner_to_dict
from app.store import EntityStore, UniqueViolation

logger = logging.getLogger(__name__)

_system_random = random.SystemRandom()


def select_winner(
    store: EntityStore,
    giveaway_id: int,
    now: datetime | None = None,
    rng: random.Random | None = None,
    testimonial: str | None = None,
    location: str | None = None,
) -> WinnerRecord:
    """Draw one entry uniformly at random from an ended giveaway.

    Moves the giveaway from ENDED to DECIDED: writes the Winner row and flags
    the drawn entry in one transaction. The unique key on Winner.giveaway_id
    makes a second draw fail with Conflict even when two run concurrently.
    """
    giveaway = get_giveaway_or_raise(store, giveaway_id)
    now = now or utcnow()
    if not now > giveaway.end_date:
        raise NotEnded("Giveaway has not ended yet")
    if store.find_one(WinnerRecord, giveaway_id=giveaway_id):
        raise Conflict("A winner has already been selected for this giveaway")

    rng = rng or _system_random
    try:
        with store.transaction():
            pool = store.list(EntryRecord, giveaway_id=giveaway_id)
            if not pool:
                raise NoEntries("No eligible entries found for this giveaway")
            picked = pool[rng.randrange(len(pool))]
            winner = store.create(
                WinnerRecord,
                {
                    "giveaway_id": giveaway_id,
                    "user_id": picked.user_id,
                    "entry_id": picked.id,
                    "testimonial": testimonial,
                    "location": location,
                },
            )
            store.update(EntryRecord, picked.id, {"is_winner": True})
    except UniqueViolation as exc:
        raise Conflict("A winner has already been selected for this giveaway") from exc

    logger.info(
        "Winner drawn for giveaway id=%s: entry id=%s user id=%s (pool=%s)",
        giveaway_id,
        picked.id,
        picked.user_id,
        len(pool),
    )
    return winner


def list_winners(store: EntityStore) -> list[WinnerRecord]:
    return store.list(WinnerRecord)


def list_winners_for_giveaway(store: EntityStore, giveaway_id: int) -> list[WinnerRecord]:
    return store.list(WinnerRecord, giveaway_id=giveaway_id)


def recent_winners(store: EntityStore, limit: int = 5) -> list[dict]:
    rows = sorted(
        store.list(WinnerRecord),
        key=lambda row: (row.announcement_date, row.id),
        reverse=True,
    )[:limit]
    return [
        {
            **winner_to_dict(row),
            "user": user_summary(store.get(UserRecord, row.user_id)),
            "giveaway": giveaway_summary(store.get(GiveawayRecord, row.giveaway_id)),
        }
        for row in rows
    ]

from app.db.models.entry import Entry
from app.db.models.giveaway import Giveaway
from app.db.models.referral import ReferralCode, ReferralEntry
from app.db.models.user import User
from app.db.models.winner import Winner

__all__ = [
    "Entry",
    "Giveaway",
    "ReferralCode",
    "ReferralEntry",
    "User",
    "Winner",
]

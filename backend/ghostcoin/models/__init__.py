from ghostcoin.models.claim import Claim
from ghostcoin.models.drop import Drop
from ghostcoin.models.profile import Profile
from ghostcoin.models.user_role import UserRole

__all__ = [
    "Claim",
    "Drop",
    "Profile",
    "UserRole",
]

"""
Scan -> claim. Turns a scanned drop code into a pending claim or a rejection.

Checks run in order and stop at the first failure:
  1. drop code resolves to a drop                       else rejected_invalid
  2. claimant has a wallet (only if require_wallet)     else rejected_wallet_missing
  3. drop is not expired                                else rejected_expired
  4. no existing claim under the claim policy           else rejected_duplicate
  5. insert pending claim
The lookup in 4 and the insert in 5 are not atomic; the (drop_id, claim_key) unique
constraint settles races, and the losing insert is reported as rejected_duplicate.
Any other constraint failure on insert (e.g. the drop was deleted meanwhile) is write_conflict.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ghostcoin.config import settings
from ghostcoin.core.constants import CLAIM_POLICY_FIRST_CLAIMANT_WINS, CLAIM_POLICY_PER_USER
from ghostcoin.core.errors import CLAIM_ERROR_MESSAGES, ClaimError
from ghostcoin.models.claim import Claim
from ghostcoin.models.drop import Drop
from ghostcoin.services.claim_service import find_claim, insert_claim, is_claim_key_conflict
from ghostcoin.services.drop_service import get_drop_by_code
from ghostcoin.services.eligibility import is_expired
from ghostcoin.services.profile_service import get_profile

logger = logging.getLogger(__name__)


class ClaimPolicy(str, Enum):
    PER_USER = CLAIM_POLICY_PER_USER
    FIRST_CLAIMANT_WINS = CLAIM_POLICY_FIRST_CLAIMANT_WINS


class ClaimState(str, Enum):
    SCANNED = "scanned"
    VALIDATING = "validating"
    ACCEPTED = "accepted"
    REJECTED_INVALID = "rejected_invalid"
    REJECTED_EXPIRED = "rejected_expired"
    REJECTED_DUPLICATE = "rejected_duplicate"
    REJECTED_WALLET_MISSING = "rejected_wallet_missing"
    WRITE_CONFLICT = "write_conflict"
    UNKNOWN = "unknown"


_STATE_ERRORS: dict[ClaimState, ClaimError] = {
    ClaimState.REJECTED_INVALID: ClaimError.INVALID_CODE,
    ClaimState.REJECTED_EXPIRED: ClaimError.EXPIRED,
    ClaimState.REJECTED_DUPLICATE: ClaimError.DUPLICATE,
    ClaimState.REJECTED_WALLET_MISSING: ClaimError.WALLET_MISSING,
    ClaimState.WRITE_CONFLICT: ClaimError.WRITE_CONFLICT,
    ClaimState.UNKNOWN: ClaimError.UNKNOWN,
}

_DUPLICATE_MESSAGES: dict[ClaimPolicy, str] = {
    ClaimPolicy.PER_USER: "You have already claimed this ghost drop.",
    ClaimPolicy.FIRST_CLAIMANT_WINS: "Sorry, this ghost has already been claimed by another hunter.",
}


@dataclass
class ClaimOutcome:
    state: ClaimState
    message: str
    claim: Claim | None = None
    drop: Drop | None = None

    @property
    def accepted(self) -> bool:
        return self.state == ClaimState.ACCEPTED

    @property
    def error(self) -> ClaimError | None:
        return _STATE_ERRORS.get(self.state)


def _success_message(drop: Drop) -> str:
    return (
        f'You\'ve claimed "{drop.title}". Prize: {drop.prize or "N/A"}. '
        "Your claim is now pending review."
    )


class ClaimWorkflow:
    """One instance per request; holds the session and the claim rules in force."""

    def __init__(
        self,
        db: Session,
        policy: ClaimPolicy | str | None = None,
        require_wallet: bool | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.db = db
        self.policy = ClaimPolicy(policy or settings.claim_policy)
        self.require_wallet = settings.require_wallet_for_claim if require_wallet is None else require_wallet
        self._now = now or (lambda: datetime.now(timezone.utc))
        self.state = ClaimState.SCANNED

    def _reject(self, state: ClaimState, drop: Drop | None = None, message: str | None = None) -> ClaimOutcome:
        self.state = state
        error = _STATE_ERRORS[state]
        return ClaimOutcome(state=state, message=message or CLAIM_ERROR_MESSAGES[error], drop=drop)

    def run(self, drop_code: str, user_id: str) -> ClaimOutcome:
        self.state = ClaimState.VALIDATING
        try:
            outcome = self._validate_and_insert(drop_code, user_id)
        except Exception:
            self.db.rollback()
            logger.exception("Claim failed unexpectedly: code=%s user=%s", drop_code, user_id)
            return self._reject(ClaimState.UNKNOWN)
        if outcome.accepted:
            logger.info(
                "Claim accepted: claim=%s drop=%s user=%s policy=%s",
                outcome.claim.id, outcome.drop.id, user_id, self.policy.value,
            )
        else:
            logger.info("Claim rejected (%s): code=%s user=%s", outcome.state.value, drop_code, user_id)
        return outcome

    def _validate_and_insert(self, drop_code: str, user_id: str) -> ClaimOutcome:
        now = self._now()

        # 1) Drop code
        drop = get_drop_by_code(self.db, drop_code)
        if drop is None:
            return self._reject(ClaimState.REJECTED_INVALID)

        # 2) Wallet (read only; a rejected scan writes nothing)
        profile = get_profile(self.db, user_id)
        wallet = (profile.wallet_address if profile else None) or None
        if self.require_wallet and not wallet:
            return self._reject(ClaimState.REJECTED_WALLET_MISSING, drop)

        # 3) Expiry
        if is_expired(drop, now):
            return self._reject(ClaimState.REJECTED_EXPIRED, drop)

        # 4) Existing claim under the policy
        lookup_user = user_id if self.policy == ClaimPolicy.PER_USER else None
        if find_claim(self.db, drop.id, lookup_user) is not None:
            return self._reject(ClaimState.REJECTED_DUPLICATE, drop, _DUPLICATE_MESSAGES[self.policy])

        # 5) Insert
        try:
            claim = insert_claim(self.db, drop.id, user_id, wallet, policy=self.policy.value, claimed_at=now)
        except IntegrityError as e:
            if is_claim_key_conflict(e):
                logger.warning("Claim insert lost a race: drop=%s user=%s policy=%s", drop.id, user_id, self.policy.value)
                return self._reject(ClaimState.REJECTED_DUPLICATE, drop, _DUPLICATE_MESSAGES[self.policy])
            logger.warning("Claim insert violated a constraint: drop=%s user=%s: %s", drop.id, user_id, e.orig)
            return self._reject(ClaimState.WRITE_CONFLICT, drop)
        except SQLAlchemyError as e:
            logger.warning("Claim insert failed: drop=%s user=%s: %s", drop.id, user_id, e)
            return self._reject(ClaimState.WRITE_CONFLICT, drop)

        self.state = ClaimState.ACCEPTED
        return ClaimOutcome(state=ClaimState.ACCEPTED, message=_success_message(drop), claim=claim, drop=drop)

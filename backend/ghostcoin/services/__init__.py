from ghostcoin.services.claim_workflow import ClaimOutcome, ClaimPolicy, ClaimState, ClaimWorkflow
from ghostcoin.services.eligibility import GeoPoint, ViewerContext, visible_drops

__all__ = ["ClaimOutcome", "ClaimPolicy", "ClaimState", "ClaimWorkflow", "GeoPoint", "ViewerContext", "visible_drops"]

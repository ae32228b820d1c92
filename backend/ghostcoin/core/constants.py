"""
Centralized constants for drops, claims and token gating.

Change limits or policy values here instead of scattering literals across routes and services.
Environment-driven knobs (radius, claim policy, RPC) live in ghostcoin.config.
"""
# Haversine earth radius; distances are only used as a filter predicate
EARTH_RADIUS_MILES = 3959.0

# Drops farther than this from a known viewer position are hidden (settings.max_drop_distance_miles overrides)
MAX_DROP_DISTANCE_MILES = 100.0

# GHOX is an 18-decimal ERC-20; thresholds are entered as whole tokens
TOKEN_DECIMALS = 18
BALANCE_CACHE_MAX_ENTRIES = 4096
# Numeric(38, 18) holds 20 integer digits
MAX_MIN_TOKEN_REQUIRED = 10**20

# List caps (match what the clients showed)
RECENT_DROPS_LIMIT = 10
RECENT_DROPS_MAX_LIMIT = 100
ADMIN_DROPS_LIMIT = 20
ADMIN_CLAIMS_LIMIT = 50

# Claim lifecycle
CLAIM_STATUS_PENDING = "pending"
CLAIM_STATUS_PAID = "paid"
CLAIM_STATUS_REJECTED = "rejected"
CLAIM_STATUSES = (CLAIM_STATUS_PENDING, CLAIM_STATUS_PAID, CLAIM_STATUS_REJECTED)

# Claim policies and the claim_key stored per row (unique with drop_id)
CLAIM_POLICY_PER_USER = "per_user"
CLAIM_POLICY_FIRST_CLAIMANT_WINS = "first_claimant_wins"
FIRST_CLAIMANT_KEY = "*"
CLAIM_KEY_CONSTRAINT = "uq_claims_drop_claim_key"

# Roles (user_roles.role)
ROLE_ADMIN = "admin"
ROLE_USER = "user"
APP_ROLES = (ROLE_ADMIN, ROLE_USER)

# Wallets and drop codes
WALLET_ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
DROP_CODE_LENGTH = 22
DROP_CODE_MAX_LENGTH = 64

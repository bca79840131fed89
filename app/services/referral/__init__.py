"""
Referral services package.

Contains modular services for the referral & subscription ledger:
- config: Configuration constants (REFERRAL_DEPTH, REFERRAL_RATES)
- chain_manager: Upward chain walks and downline lookups
- subscription_service: Subscriptions, referral links and tier table
- signature: Subscription code signing/verification capability
- commission_processor: Ladder commissions on realized profit
"""

from app.services.referral.chain_manager import ReferralChainManager
from app.services.referral.commission_processor import (
    CommissionPayout,
    CommissionResult,
    ReferralCommissionProcessor,
)
from app.services.referral.config import REFERRAL_DEPTH, REFERRAL_RATES
from app.services.referral.signature import (
    EthSignatureVerifier,
    SignatureVerifier,
    sign_subscription_code,
)
from app.services.referral.subscription_service import (
    AccountInfo,
    SubscriptionService,
    TierInfo,
)


__all__ = [
    # Configuration
    "REFERRAL_DEPTH",
    "REFERRAL_RATES",
    # Managers
    "ReferralChainManager",
    "SubscriptionService",
    "AccountInfo",
    "TierInfo",
    # Signatures
    "EthSignatureVerifier",
    "SignatureVerifier",
    "sign_subscription_code",
    # Commissions
    "ReferralCommissionProcessor",
    "CommissionPayout",
    "CommissionResult",
]

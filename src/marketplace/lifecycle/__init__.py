"""Campaign lifecycle engine and profile service."""

from marketplace.lifecycle.engine import CampaignLifecycleEngine, transactional
from marketplace.lifecycle.profiles import ProfileService
from marketplace.lifecycle.views import Applicant, CampaignSummary, MyApplication, MyInvitation

__all__ = [
    "Applicant",
    "CampaignLifecycleEngine",
    "CampaignSummary",
    "MyApplication",
    "MyInvitation",
    "ProfileService",
    "transactional",
]

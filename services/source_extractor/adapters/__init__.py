"""Job Board Adapters.

This package contains concrete implementations of the SourceAdapter interface
for different job boards.

Available adapters:
- WorkableAdapter: Workable public job search (workable_adapter.py)
- SmartRecruitersAdapter: SmartRecruiters search plus job ad details (smartrecruiters_adapter.py)
- HiringCafeAdapter: Hiring.cafe search (hiringcafe_adapter.py)
- MockAdapter: Offline adapter for tests and local runs (mock_adapter.py)
"""

from .hiringcafe_adapter import HiringCafeAdapter
from .mock_adapter import MockAdapter
from .smartrecruiters_adapter import SmartRecruitersAdapter
from .workable_adapter import WorkableAdapter

__all__ = ["HiringCafeAdapter", "MockAdapter", "SmartRecruitersAdapter", "WorkableAdapter"]

"""ActionQA — declarative UI test automation with step-by-step run control."""

from actionqa.config import ActionQAConfig, ActionQAConfigError
from actionqa.dsl import Automation
from actionqa.models import EventName, TestSpeed

__version__ = "0.3.0"

__all__ = [
    "ActionQAConfig",
    "ActionQAConfigError",
    "Automation",
    "EventName",
    "TestSpeed",
    "__version__",
]

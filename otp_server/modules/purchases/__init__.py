"""Purchase lifecycle exports"""

from .models import FailureKind, LifecycleResult
from .service import PurchaseService

__all__ = ["FailureKind", "LifecycleResult", "PurchaseService"]

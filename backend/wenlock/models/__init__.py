from wenlock.models.user import User
from wenlock.models.counter import Counter
from wenlock.models.token import QueueToken
from wenlock.models.schedule import Schedule
from wenlock.models.inventory import InventoryItem
from wenlock.models.alert import Alert
from wenlock.models.audit_log import AuditLog

__all__ = ["User", "Counter", "QueueToken", "Schedule", "InventoryItem", "Alert", "AuditLog"]

import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    OT_STAFF = "ot_staff"
    PHARMACY_STAFF = "pharmacy_staff"
    GENERAL_STAFF = "general_staff"


class ScheduleType(str, enum.Enum):
    OT = "OT"
    CONSULTATION = "Consultation"


class ScheduleStatus(str, enum.Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class AlertType(str, enum.Enum):
    CODE_BLUE = "Code Blue"
    CODE_RED = "Code Red"
    EMERGENCY = "Emergency"


class AuditAction(str, enum.Enum):
    USER_LOGIN = "user_login"
    USER_REGISTER = "user_register"
    USER_UPDATE = "user_update"
    USER_DELETE = "user_delete"
    SCHEDULE_CREATE = "schedule_create"
    SCHEDULE_UPDATE = "schedule_update"
    SCHEDULE_DELETE = "schedule_delete"
    TOKEN_ADVANCE = "token_advance"
    TOKEN_RESET = "token_reset"
    INVENTORY_CREATE = "inventory_create"
    INVENTORY_UPDATE = "inventory_update"
    INVENTORY_DELETE = "inventory_delete"
    ALERT_TRIGGER = "alert_trigger"
    ALERT_DEACTIVATE = "alert_deactivate"
    REPORT_ACCESS = "report_access"
    INTEGRATION_FETCH = "integration_fetch"
    INTEGRATION_SYNC = "integration_sync"


class ResourceType(str, enum.Enum):
    USER = "User"
    SCHEDULE = "Schedule"
    TOKEN = "Token"
    INVENTORY = "Inventory"
    ALERT = "Alert"
    REPORT = "Report"
    INTEGRATION = "Integration"

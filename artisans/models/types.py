from enum import Enum


class UserRole(str, Enum):
    CLIENT = "client"
    CONTRACTOR = "contractor"
    SUPPLIER = "supplier"
    ADMIN = "admin"


class ProjectRole(str, Enum):
    OWNER = "owner"
    PROJECT_MANAGER = "project_manager"
    CONTRACTOR = "contractor"
    INSPECTOR = "inspector"
    RELATIVE = "relative"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class NotificationType(str, Enum):
    PROJECT = "project"
    PROJECT_TEAM = "project_team"
    ORDER = "order"
    MESSAGE = "message"
    SERVICE_REQUEST = "service_request"
    PAYMENT = "payment"
    BID = "bid"
    INVITATION = "invitation"
    PROJECT_UPDATE = "project_update"
    SCHEDULE_CHANGE = "schedule_change"
    MATERIAL_REQUEST = "material_request"
    INVENTORY = "inventory"
    SYSTEM = "system"

from enum import Enum


class Role(str, Enum):
    PATIENT = "PATIENT"
    CAREGIVER = "CAREGIVER"


class PermissionStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class PermissionLevel(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    ADMIN = "ADMIN"

    @property
    def rank(self) -> int:
        return _PERMISSION_LEVEL_RANK[self]

    def grants(self, required: "PermissionLevel") -> bool:
        """True when holding this level satisfies ``required``."""
        return self.rank >= required.rank


# Explicit ranking; never rely on declaration or string order.
_PERMISSION_LEVEL_RANK = {
    PermissionLevel.READ: 0,
    PermissionLevel.WRITE: 1,
    PermissionLevel.ADMIN: 2,
}


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

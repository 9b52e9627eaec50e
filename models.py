from enum import Enum

# Définition des énumérations pour les rôles et statuts
# Cela garantit que seules les valeurs prédéfinies peuvent être utilisées.
class UserRole(str, Enum):
    donor = "donor"
    volunteer = "volunteer"
    admin = "admin"

class UserStatus(str, Enum):
    active = "active"
    blocked = "blocked"

class DonationStatus(str, Enum):
    pending = "pending"
    inprogress = "inprogress"
    done = "done"
    canceled = "canceled"

class BlogStatus(str, Enum):
    draft = "draft"
    published = "published"


# Rôles qu'un admin peut attribuer (pas de retour à "donor" par cette voie)
ASSIGNABLE_ROLES = {UserRole.admin.value, UserRole.volunteer.value}

# Statuts visés par la transition directe /requests/:id/status
FINAL_STATUSES = {DonationStatus.done.value, DonationStatus.canceled.value}

# Table des transitions autorisées : done et canceled sont terminaux.
DONATION_TRANSITIONS = {
    DonationStatus.pending.value: {DonationStatus.inprogress.value},
    DonationStatus.inprogress.value: {DonationStatus.done.value, DonationStatus.canceled.value},
    DonationStatus.done.value: set(),
    DonationStatus.canceled.value: set(),
}

DONATION_STATUS_VALUES = set(DONATION_TRANSITIONS)


def can_transition(current: str, target: str) -> bool:
    return target in DONATION_TRANSITIONS.get(current, set())

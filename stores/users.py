import logging
from datetime import datetime, timezone

from database import to_object_id
from errors import InvalidArgument, NotFound
from models import ASSIGNABLE_ROLES, UserRole, UserStatus

# Champs jamais renvoyés par la recherche publique de donneurs
CREDENTIAL_FIELDS = {"password": 0}

# Jamais repris du profil envoyé par le client
SERVER_MANAGED_FIELDS = {"_id", "email", "role", "status", "created_at", "last_login"}


class UserStore:
    """Accès à la collection `users`, indexée logiquement par email."""

    def __init__(self, collection, districts: dict | None = None):
        self.collection = collection
        self.districts = districts or {}

    async def find_by_email(self, email: str):
        return await self.collection.find_one({"email": email})

    async def upsert_login(self, email: str, profile: dict):
        """
        Crée l'utilisateur à la première connexion, sinon rafraîchit last_login.
        Un seul update_one(upsert=True) : deux connexions simultanées ne créent
        jamais deux documents.
        """
        if not email:
            raise InvalidArgument("Email is required")
        now = datetime.now(timezone.utc)

        user_data = {k: v for k, v in profile.items() if k not in SERVER_MANAGED_FIELDS}
        user_data.update({
            "role": UserRole.donor.value,
            "status": UserStatus.active.value,
            "created_at": now,
        })
        result = await self.collection.update_one(
            {"email": email},
            {"$set": {"last_login": now}, "$setOnInsert": user_data},
            upsert=True
        )
        if result.upserted_id is not None:
            logging.info(f"Création de l'utilisateur {email}")
        else:
            logging.info(f"Mise à jour de last_login pour {email}")
        return result

    async def list_users(self, status: str | None = None) -> list:
        query = {}
        if status and status != "all":
            query["status"] = status
        return await self.collection.find(query).to_list(length=None)

    async def set_status(self, user_id: str, status: str):
        if status not in {s.value for s in UserStatus}:
            raise InvalidArgument("Invalid status")
        return await self._set_field(user_id, "status", status)

    async def set_role(self, user_id: str, role: str):
        if role not in ASSIGNABLE_ROLES:
            raise InvalidArgument("Invalid role")
        return await self._set_field(user_id, "role", role)

    async def _set_field(self, user_id: str, field: str, value: str):
        result = await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {field: value}}
        )
        if result.matched_count == 0:
            raise NotFound("User Not Found")
        return result

    async def find_role(self, email: str) -> str:
        user = await self.collection.find_one({"email": email})
        if not user:
            raise NotFound("User Not Found")
        return user.get("role")

    async def search_donors(self, blood_group: str, district_id, upazila: str) -> list:
        query = {
            "role": UserRole.donor.value,
            "status": UserStatus.active.value,
            "bloodGroup": blood_group,
            "district": str(district_id),
            "upazila": upazila,
        }
        donors = await self.collection.find(query, CREDENTIAL_FIELDS).to_list(length=None)
        for donor in donors:
            donor["districtName"] = self.districts.get(str(donor.get("district")), "Unknown")
        return donors

    async def count_donors(self) -> int:
        return await self.collection.count_documents({"role": UserRole.donor.value})

    async def promote_to_admin(self, email: str):
        result = await self.collection.update_one(
            {"email": email},
            {"$set": {"role": UserRole.admin.value, "status": UserStatus.active.value}}
        )
        if result.matched_count == 0:
            raise NotFound("User Not Found")
        return result

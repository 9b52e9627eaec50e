from datetime import datetime, timezone

from pymongo import DESCENDING

from errors import InvalidArgument

REQUIRED_FIELDS = ("name", "email", "contact", "message")


class ContactStore:
    def __init__(self, collection):
        self.collection = collection

    async def create(self, name, email, contact, message):
        values = {"name": name, "email": email, "contact": contact, "message": message}
        missing = [field for field in REQUIRED_FIELDS if not str(values[field] or "").strip()]
        if missing:
            raise InvalidArgument(f"Missing required fields: {', '.join(missing)}")
        values["createdAt"] = datetime.now(timezone.utc)
        return await self.collection.insert_one(values)

    async def list(self) -> list:
        return await self.collection.find({}).sort([("createdAt", DESCENDING), ("_id", DESCENDING)]).to_list(length=None)

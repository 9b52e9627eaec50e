from datetime import datetime, timezone

from pymongo import DESCENDING

from database import to_object_id
from errors import InvalidArgument, NotFound
from models import BlogStatus


class BlogStore:
    def __init__(self, collection):
        self.collection = collection

    async def create(self, title: str, content: str, thumbnail: str | None = None):
        # Un blog est toujours créé en brouillon
        blog = {
            "title": title,
            "thumbnail": thumbnail,
            "content": content,
            "status": BlogStatus.draft.value,
            "createdAt": datetime.now(timezone.utc),
        }
        return await self.collection.insert_one(blog)

    async def list(self, status: str | None = None) -> list:
        query = {} if not status or status == "all" else {"status": status}
        return await self.collection.find(query).sort([("createdAt", DESCENDING), ("_id", DESCENDING)]).to_list(length=None)

    async def get_by_id(self, blog_id: str) -> dict:
        blog = await self.collection.find_one({"_id": to_object_id(blog_id)})
        if not blog:
            raise NotFound("Blog not found")
        return blog

    async def set_status(self, blog_id: str, status: str):
        if status not in {s.value for s in BlogStatus}:
            raise InvalidArgument("Invalid blog status")
        result = await self.collection.update_one(
            {"_id": to_object_id(blog_id)},
            {"$set": {"status": status}}
        )
        if result.matched_count == 0:
            raise NotFound("Blog not found")
        return result

    async def delete(self, blog_id: str) -> bool:
        result = await self.collection.delete_one({"_id": to_object_id(blog_id)})
        return result.deleted_count > 0

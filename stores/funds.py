from datetime import datetime, timezone

from pymongo import DESCENDING


class FundStore:
    def __init__(self, collection):
        self.collection = collection

    async def create(self, name: str, email: str, amount: float):
        fund = {
            "name": name,
            "email": email,
            "amount": amount,
            "date": datetime.now(timezone.utc),
            "status": "success",
        }
        return await self.collection.insert_one(fund)

    async def list(self) -> list:
        return await self.collection.find({}).sort([("date", DESCENDING), ("_id", DESCENDING)]).to_list(length=None)

    async def total_amount(self) -> float:
        funds = await self.collection.find({}, {"amount": 1}).to_list(length=None)
        return sum(fund.get("amount") or 0 for fund in funds)

# Base de données: connexion MongoDB asynchrone et helpers de sérialisation.

from bson import ObjectId
from fastapi import Request
from pymongo import AsyncMongoClient

from config import MONGODB_URI, DB_NAME
from errors import InvalidArgument


def create_mongo_client(uri: str = MONGODB_URI) -> AsyncMongoClient:
    """Crée le client une seule fois au démarrage ; il est rangé dans app.state."""
    return AsyncMongoClient(uri)


# Dépendance FastAPI pour obtenir la base MongoDB de l'application
def get_mongo_db(request: Request):
    return request.app.state.mongo_client[DB_NAME]


def to_object_id(value: str) -> ObjectId:
    if not ObjectId.is_valid(value):
        raise InvalidArgument(f"Invalid ObjectId: {value}")
    return ObjectId(value)


def document_helper(document: dict | None) -> dict | None:
    """Convertit un document MongoDB en dict sérialisable (ObjectId -> str)."""
    if document is None:
        return None
    data = dict(document)
    if "_id" in data:
        data["_id"] = str(data["_id"])
    return data


# Résultats d'écriture, dans la forme renvoyée historiquement au frontend
def insert_result(result) -> dict:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result(result) -> dict:
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
    }


def delete_result(removed: bool) -> dict:
    return {"acknowledged": True, "deletedCount": int(removed)}


def upsert_result(result) -> dict:
    """Forme d'insertion si l'upsert a créé le document, sinon forme de mise à jour."""
    if result.upserted_id is not None:
        return {"acknowledged": result.acknowledged, "insertedId": str(result.upserted_id)}
    return update_result(result)

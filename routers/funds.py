import logging

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

import schemas
from database import document_helper, insert_result
from dependencies import get_current_user, get_fund_store
from errors import Internal
from stores import FundStore

router = APIRouter()

@router.post("/create-fund", summary="Enregistrer un financement")
async def create_fund(
    body: schemas.FundCreate,
    funds: FundStore = Depends(get_fund_store),
    current_user: schemas.User = Depends(get_current_user)
):
    try:
        result = await funds.create(body.name, body.email, body.amount)
    except PyMongoError as e:
        logging.error(f"Échec de l'enregistrement du financement de {body.email}: {e}")
        raise Internal("Failed to create fund")
    logging.info(f"Financement de {body.amount} enregistré pour {body.email}")
    return insert_result(result)

@router.get("/funds", summary="Lister les financements")
async def list_funds(
    funds: FundStore = Depends(get_fund_store),
    current_user: schemas.User = Depends(get_current_user)
):
    try:
        found = await funds.list()
    except PyMongoError as e:
        logging.error(f"Échec de la lecture des financements: {e}")
        raise Internal("Failed to fetch funds")
    return [document_helper(fund) for fund in found]

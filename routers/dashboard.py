import logging

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

import schemas
from dependencies import get_current_staff_user, get_fund_store, get_request_store, get_user_store
from errors import Internal
from stores import DonationRequestStore, FundStore, UserStore

router = APIRouter()

@router.get("/dashboard-stats", summary="Statistiques du tableau de bord admin")
async def dashboard_stats(
    users: UserStore = Depends(get_user_store),
    requests: DonationRequestStore = Depends(get_request_store),
    funds: FundStore = Depends(get_fund_store),
    current_user: schemas.User = Depends(get_current_staff_user)
):
    """Fournit le nombre de donneurs, de demandes et le total des financements."""
    try:
        total_donors = await users.count_donors()
        total_requests = await requests.count()
        total_funding = await funds.total_amount()
    except PyMongoError as e:
        logging.error(f"Échec du calcul des statistiques: {e}")
        raise Internal("Failed to fetch dashboard stats")
    return {
        "totalDonors": total_donors,
        "totalRequests": total_requests,
        "totalFunding": total_funding,
    }

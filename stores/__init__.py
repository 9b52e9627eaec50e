from stores.users import UserStore
from stores.donation_requests import DonationRequestStore
from stores.blogs import BlogStore
from stores.funds import FundStore
from stores.contacts import ContactStore
from stores.districts import load_districts

__all__ = [
    "UserStore",
    "DonationRequestStore",
    "BlogStore",
    "FundStore",
    "ContactStore",
    "load_districts",
]

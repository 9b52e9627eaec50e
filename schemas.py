from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from models import UserRole, UserStatus, DonationStatus, BlogStatus

# --- Schémas pour l'Authentification ---

class Identity(BaseModel):
    """Champs d'identité envoyés par le frontend après la connexion."""
    model_config = ConfigDict(extra="allow")

    email: EmailStr
    name: Optional[str] = None

class Success(BaseModel):
    success: bool

# Schéma pour l'utilisateur courant (résolu depuis le cookie de session)
class User(BaseModel):
    id: Optional[str] = None  # MongoDB ObjectId as str
    email: EmailStr
    name: Optional[str] = None
    role: UserRole = UserRole.donor
    status: UserStatus = UserStatus.active

# Profil envoyé à POST /user
class UserProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: EmailStr
    name: Optional[str] = None
    image: Optional[str] = None
    bloodGroup: Optional[str] = None
    district: Optional[str] = None
    upazila: Optional[str] = None

    @field_validator("district", mode="before")
    @classmethod
    def district_as_string(cls, v):
        # Le frontend envoie l'id de district en nombre ou en texte
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, (int, str)):
            raise ValueError("district must be a district id")
        return str(v)

# Les valeurs sont validées par UserStore (400 "Invalid status" / "Invalid role")
class UserStatusUpdate(BaseModel):
    status: str

class UserRoleUpdate(BaseModel):
    role: str

# --- Schémas pour les demandes de don ---

class DonationRequestCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    requesterName: Optional[str] = None
    requesterEmail: Optional[EmailStr] = None
    recipientName: Optional[str] = None
    recipientDistrict: Optional[str] = None
    recipientUpazila: Optional[str] = None
    hospitalName: Optional[str] = None
    fullAddress: Optional[str] = None
    bloodGroup: Optional[str] = None
    donationDate: Optional[str] = None
    donationTime: Optional[str] = None
    requestMessage: Optional[str] = None

class DonationRequestUpdate(DonationRequestCreate):
    donorName: Optional[str] = None
    donorEmail: Optional[EmailStr] = None
    donationStatus: Optional[DonationStatus] = None

class StatusUpdate(BaseModel):
    status: str

# --- Schémas annexes ---

class BlogCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    thumbnail: Optional[str] = None

class BlogStatusUpdate(BaseModel):
    status: BlogStatus

class FundCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    amount: float = Field(gt=0)

# Les champs restent optionnels ici : ContactStore rejette les manquants
class ContactCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    message: Optional[str] = None

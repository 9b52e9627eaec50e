# config.py
"""
Fichier de configuration centralisée pour le backend BloodBank.
Les valeurs viennent de l'environnement (.env chargé par main.py).
"""
import os

# Base de données MongoDB
MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017/")
DB_NAME = os.getenv("DB_NAME", "BloodDB")

# Configuration de la sécurité JWT (JSON Web Token)
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "change_me_blood_bank_secret")  # IMPORTANT: à définir en production
ALGORITHM = "HS256"
TOKEN_EXPIRE_DAYS = int(os.getenv("TOKEN_EXPIRE_DAYS", "365"))
COOKIE_NAME = "token"

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"

# Origines autorisées pour le frontend (séparées par des virgules)
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:5173,http://localhost:5174"
).split(",")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

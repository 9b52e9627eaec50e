import asyncio
import sys

from dotenv import load_dotenv
from pymongo.errors import ConnectionFailure

load_dotenv()

from config import DB_NAME  # noqa: E402
from database import create_mongo_client  # noqa: E402
from errors import NotFound  # noqa: E402
from stores import UserStore  # noqa: E402


async def bootstrap_admin(users: UserStore, email: str) -> bool:
    """
    Promeut un utilisateur existant en administrateur actif.
    L'utilisateur doit s'être connecté au moins une fois (POST /user).
    """
    try:
        await users.promote_to_admin(email)
    except NotFound:
        print(f"Aucun utilisateur '{email}'. Connectez-vous d'abord une fois avec ce compte.")
        return False
    print(f"L'utilisateur '{email}' est maintenant administrateur.")
    return True


async def main(email: str) -> int:
    client = create_mongo_client()
    try:
        users = UserStore(client[DB_NAME]["users"])
        return 0 if await bootstrap_admin(users, email) else 1
    except ConnectionFailure as e:
        print(f"Erreur de connexion à MongoDB : {e}")
        return 1
    finally:
        await client.close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python create_admin.py <email>")
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1])))

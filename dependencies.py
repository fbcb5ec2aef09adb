# dependencies.py
"""
Shared FastAPI dependencies: bearer-token verification and the account
resolver that scopes every billing call to one account.
"""
import os

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from dotenv import load_dotenv

from database import get_session
from models import Account

load_dotenv()
SECRET_KEY = os.getenv("JWT_SECRET")
ALGORITHM = "HS256"


# Token Auth Dependency
def verify_token(request: Request) -> dict:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     if not SECRET_KEY:
          raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="JWT_SECRET is not configured")
     token = auth.split(" ", 1)[1]
     try:
          payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
          return payload
     except JWTError:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")


def get_account_id(
     token: dict = Depends(verify_token),
     db: Session = Depends(get_session),
) -> int:
     """
     Resolve the caller's account.

     An explicit account_id claim wins (team members); otherwise the account
     owned by the token's user id is used.
     """
     account_id = token.get("account_id")
     if account_id is not None:
          try:
               return int(account_id)
          except (TypeError, ValueError):
               raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid account claim")

     user_id = token.get("id")
     if user_id is None:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token has no user id")
     account = db.query(Account).filter(Account.owner_id == user_id).first()
     if not account:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No account for this user")
     return account.id

# backend/routes/auth.py
import logging
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from utils.identity import authenticate, create_identity, delete_identity
from utils.tokenJWT import create_access_token, get_current_user
from utils.audit import write_log, client_ip
from utils.errors import IdentityExistsError, InvalidRoleError
from models.users import User
from schemas import user as schemas
from database import get_db

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)

def _token_for(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})

# Register a new identity; the provisioning hook creates its profile
@router.post("/signup", response_model=schemas.SignUpResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: schemas.SignUpRequest, request: Request, db: Session = Depends(get_db)):
    try:
        user = create_identity(db, payload.email, payload.password, payload.data)
    except IdentityExistsError:
        write_log(db, user_id=None, action="SIGNUP", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email, "reason": "Email exists"})
        raise HTTPException(status_code=400, detail="User already registered")
    except InvalidRoleError as e:
        write_log(db, user_id=None, action="SIGNUP", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email, "reason": str(e)})
        raise HTTPException(status_code=400, detail=str(e))

    # Log successful signup event
    write_log(db, user_id=user.id, action="SIGNUP", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": user.email, "role": user.profile.role.value})

    return {"access_token": _token_for(user), "token_type": "bearer", "user": user}


# Authenticate identity and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)

    # Validate credentials and log failure on error
    if user is None:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    write_log(db, user_id=user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"email": user.email})

    return {"access_token": _token_for(user), "token_type": "bearer"}


# Retrieve current authenticated identity with its profile
@router.get("/me", response_model=schemas.MeResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# Delete the current identity; profile and products are removed with it
@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(request: Request, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user_id, email = current_user.id, current_user.email
    delete_identity(db, user_id)
    logger.info("Identity %s deleted", user_id)
    write_log(db, user_id=None, action="ACCOUNT_DELETE", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"id": str(user_id), "email": email})

# backend/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db
from utils.errors import PolicyViolation

# Router imports
from routes.auth import router as auth_router
from routes.profiles import router as profiles_router
from routes.categories import router as categories_router
from routes.products import router as products_router
from routes.storage import router as storage_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialization: tables, default categories and the product-images bucket
init_db()

app = FastAPI(title="Marketplace API", version="1.0.0")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173"
]

if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Writes rejected by an authorization policy
@app.exception_handler(PolicyViolation)
async def policy_violation_handler(request: Request, exc: PolicyViolation):
    logger.warning("Policy violation on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=403, content={"detail": exc.message})


# Router registration
app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(storage_router)

@app.get("/")
def read_root():
    return {"message": "Marketplace API is running"}

# backend/main.py
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from docqa.core.config import settings
from docqa.core.logger import get_logger
from docqa.core.state import library
from docqa.api.endpoints import upload, query, documents
from docqa.api.endpoints import status as status_endpoint
from docqa.services.knowledge.providers import supported_providers

log = get_logger("docqa.main")

# --- Lifespan Function ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    log.info("Starting up backend server...")
    library.clear()  # Ensure store is empty on startup
    log.info(f"[Lifespan] Providers: {', '.join(supported_providers())} (default: {settings.DEFAULT_PROVIDER})")
    log.info(f"[Lifespan] Chunking: {settings.CHUNK_SIZE} words, overlap {settings.CHUNK_OVERLAP}; top_k={settings.SEARCH_TOP_K}")
    yield # API ready

    # --- Shutdown ---
    log.info("Shutting down backend server...")

# --- FastAPI App Instance ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

# --- API Router Setup ---
api_router = APIRouter()
api_router.include_router(upload.router, prefix="/upload", tags=["Upload"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(query.router, prefix="/ask", tags=["Query"])
api_router.include_router(status_endpoint.router, prefix="/status", tags=["Status"])

app.include_router(api_router, prefix=settings.API_V1_STR)

# --- Root Endpoint ---
@app.get("/", tags=["Root"])
async def read_root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}

# --- CORS Middleware ---
origins = [
    "http://localhost",
    "http://localhost:8501",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum

from pethub.api.routers import adoption_requests, campaigns, donations, pets, users
from pethub.core.config import get_settings
from pethub.core.errors import InconsistentState, PetHubError
from pethub.core.logging_config import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="PetLovers Hub API",
    root_path=settings.API_ROOT_PATH
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(PetHubError)
async def pethub_error_handler(request: Request, exc: PetHubError):
    if isinstance(exc, InconsistentState):
        logger.error(f"{exc.kind} on {request.url.path}: {exc.message}", extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "message": exc.message}
    )

@app.get("/")
def read_root():
    return {"message": "Hello from PetLoversHub Server.."}


app.include_router(users.router)
app.include_router(pets.router)
app.include_router(adoption_requests.router)
app.include_router(campaigns.router)
app.include_router(donations.router)

handler = Mangum(app)

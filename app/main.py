from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
import logging

from app.config import load_config
from app.middleware.session_auth import SessionAuthMiddleware
from app.utils.flash import FlashMiddleware
from app.routes import health, leaves, login, menu, staff

# Configure logging
logging.basicConfig(
    level=load_config().LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Restaurant Admin")

# Session auth runs inside the flash middleware
app.add_middleware(SessionAuthMiddleware)
app.add_middleware(FlashMiddleware)

app.mount("/static", StaticFiles(directory="app/static"), name="static")


@app.get("/")
async def root():
    return RedirectResponse("/staff")


app.include_router(health.router)
app.include_router(login.router)
# before staff so /staff/leaves is not read as a staff id
app.include_router(leaves.router)
app.include_router(staff.router)
app.include_router(menu.router)

logger.info("All routes loaded successfully")

if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)

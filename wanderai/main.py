import logging
import os
from logging.handlers import RotatingFileHandler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
from contextlib import asynccontextmanager

from wanderai.core.database import engine, Base
from wanderai.api.routers import auth, chat, history, plan

load_dotenv()

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("wanderai_server")
handler = RotatingFileHandler(
    os.environ.get("WANDERAI_LOG_FILE", "server.log"),
    maxBytes=5 * 1024 * 1024,
    backupCount=3,
)
formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler.setFormatter(formatter)
logger.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized.")
    yield


app = FastAPI(title="WanderAI Itinerary Planner API", lifespan=lifespan)

# Mount routers
app.include_router(auth.router)
app.include_router(history.router)
app.include_router(plan.router)
app.include_router(chat.router)

app.add_middleware(
    CORSMiddleware,  # type: ignore
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from config import configure_logging, get_settings
from core.lobby_store import LobbyStore
from api import lobbies, players, rounds, news
from services.estimator import LLMEstimator
from services.llm_client import LLMClient
from services.marketing_data import load_marketing_stats

settings = get_settings()
configure_logging(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 建立記憶體內的 Lobby Store 與 Estimator
    app.state.store = LobbyStore()
    llm_client = LLMClient(
        model_name=settings.openai_model,
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.llm_timeout_seconds,
    )
    app.state.estimator = LLMEstimator(
        llm_client, load_marketing_stats(settings.marketing_stats_path)
    )
    yield
    # Shutdown: 關閉 HTTP client（Lobby 狀態不落地，直接丟棄）
    await llm_client.aclose()


app = FastAPI(
    title="Business Simulation API",
    description="Backend API for the multiplayer round-based business simulation",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(lobbies.router)
app.include_router(players.router)
app.include_router(rounds.router)
app.include_router(news.router)


@app.get("/")
def root():
    return {"message": "Business Simulation Backend Running", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)

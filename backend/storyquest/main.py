from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from storyquest.api import health, stories
from storyquest.core.config import get_settings

settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Child-safe learning stories, generated and moderated for ages 4-12",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",  # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(stories.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "docs": "/docs",
        "health": "/health",
    }

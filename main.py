from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from apis import auth, boards, columns, tasks, websockets
from settings import ENVIRONMENT, ALLOWED_ORIGINS

app = FastAPI(
    title="Kanban Board API",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# CORS middleware for development
if ENVIRONMENT == "development":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

app.include_router(auth.router, prefix="/api")
app.include_router(boards.router, prefix="/api")
app.include_router(columns.router, prefix="/api")
app.include_router(tasks.router, prefix="/api")
app.include_router(websockets.router, prefix="/api")


@app.get("/api/health")
async def root():
    """API health check."""
    return {"message": "Kanban Board API is running"}

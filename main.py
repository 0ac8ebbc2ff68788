# main.py
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import asyncio
import os
from dotenv import load_dotenv

from fastapi import FastAPI, Request
from utils.keep_alive import start_keep_alive
from api import participants, weight, leaderboard, admin
from services.errors import ChallengeError
from services.supabase_service import init_supabase_service, get_supabase_service
from services.session_service import init_session_service

# Load environment variables
load_dotenv()

# Background keep-alive ping, started on startup and cancelled on shutdown
keep_alive_task = None

# Initialize FastAPI app
app = FastAPI(
    title="Weight Challenge Backend",
    description="21-day weight loss challenge: participants, points, achievements and leaderboard",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services on startup
@app.on_event("startup")
async def startup_event():
    """Initialize services when the app starts"""
    global keep_alive_task
    print("🚀 Starting Weight Challenge Backend...")

    try:
        supabase_service = init_supabase_service()
        print("✅ Supabase service initialized")

        init_session_service(supabase_service)
        print("✅ Session service initialized")

        keep_alive_task = start_keep_alive()
        if keep_alive_task:
            print("✅ Keep-alive service started")

        print("🎉 Backend startup complete!")

    except Exception as e:
        print(f"❌ Error during startup: {e}")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    """Stop background tasks when the app shuts down"""
    global keep_alive_task
    if keep_alive_task is None:
        return

    keep_alive_task.cancel()
    try:
        await keep_alive_task
    except asyncio.CancelledError:
        pass
    keep_alive_task = None
    print("🛑 Keep-alive service stopped")

@app.exception_handler(ChallengeError)
async def challenge_error_handler(request: Request, exc: ChallengeError):
    print(f"⚠️ {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message}
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    print(f"❌ Unhandled exception: {request.method} {request.url.path} - {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "An unexpected error occurred"}
    )

# Include API routers
app.include_router(participants.router, prefix="/api/participants", tags=["participants"])
app.include_router(weight.router, prefix="/api/weight", tags=["weight"])
app.include_router(leaderboard.router, prefix="/api/leaderboard", tags=["leaderboard"])
app.include_router(admin.router, prefix="/api")

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": "Weight Challenge Backend API",
        "version": "1.0.0",
        "status": "running",
        "features": ["registration", "weight_tracking", "achievements", "leaderboard", "admin"]
    }

# Health check endpoint
@app.get("/health")
async def health_check():
    supabase_health = await get_supabase_service().health_check()
    healthy = supabase_health["status"] == "healthy"

    return {
        "status": "healthy" if healthy else "unhealthy",
        "services": {
            "api": "healthy",
            "supabase": supabase_health
        }
    }

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)

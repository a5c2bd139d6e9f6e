"""Main FastAPI application."""
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from knowcode.config import API_BASE_URL, STATIC_DIR
from knowcode.dependencies.sessions import admin_portals, exam_sessions
from knowcode.routes import admin, exam
from knowcode.services.cleanup_service import schedule_sessions_cleanup
from logging_setup import setup_console_logging

setup_console_logging()

app = FastAPI(title="Know Code Extra")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_events() -> None:
    """Schedule idle-session cleanup on startup."""
    schedule_sessions_cleanup(exam_sessions, admin_portals)


@app.get("/")
def index() -> FileResponse:
    """Serve frontend index.html."""
    index_path = STATIC_DIR / "index.html"
    if not index_path.exists():
        raise HTTPException(status_code=404, detail="Frontend not found")
    return FileResponse(index_path)


@app.get("/health")
def health() -> dict[str, object]:
    return {
        "status": "ok",
        "api_base_url": API_BASE_URL,
        "exam_sessions": len(exam_sessions),
        "admin_sessions": len(admin_portals),
    }


# Mount static files when a frontend bundle is present
if STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

app.include_router(exam.router)
app.include_router(admin.router)

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path

from flow_canvas.core.config import settings
from flow_canvas.core.logger_config import configure_logging
from flow_canvas.routers import canvas_routers, project_routers

configure_logging()

# create FastAPI
app = FastAPI(title=settings.APP_NAME, version="1.0")

# create Jinja2 template engine/define templates directory
templates = Jinja2Templates(directory=Path(__file__).parent / "templates")

# get routers
app.include_router(project_routers.router, prefix="/projects", tags=["Projects"])
app.include_router(canvas_routers.router, prefix="/canvas", tags=["Canvas"])


# Landing page
@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(request, "index.html", {"app_name": settings.APP_NAME})

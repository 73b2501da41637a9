# import moduls/libraries
from fastapi import APIRouter, Depends

# import form project
from flow_canvas.core.storage import get_store
from flow_canvas.schemas import ChapterCreate, NodeTypeConfig, ProjectCreate
from flow_canvas.services import ProjectServices


router = APIRouter()


# Create project
@router.post("/", status_code=201)
async def create_project(project: ProjectCreate, store=Depends(get_store)):
    """Create a new project"""
    services = ProjectServices(store)
    return services.create_project(project)


# Get project by id
@router.get("/{project_id}")
async def get_project(project_id: str, store=Depends(get_store)):
    """Fetch one project by ID, with chapters, node types and canvas state"""
    services = ProjectServices(store)
    return services.get_project_by_id(project_id)


# Add chapter
@router.post("/{project_id}/chapters", status_code=201)
async def add_chapter(project_id: str, chapter: ChapterCreate, store=Depends(get_store)):
    """Append a chapter to the project"""
    services = ProjectServices(store)
    return services.add_chapter(project_id, chapter)


# Add or replace node type
@router.post("/{project_id}/node-types", status_code=201)
async def add_node_type(project_id: str, node_type: NodeTypeConfig, store=Depends(get_store)):
    """Add a node type (replaces one with the same id)"""
    services = ProjectServices(store)
    return services.add_node_type(project_id, node_type)


# Node detail (target of "open detail" on the canvas)
@router.get("/{project_id}/nodes/{node_id}")
async def get_node(project_id: str, node_id: str, store=Depends(get_store)):
    """Fetch one node of the project"""
    services = ProjectServices(store)
    return services.get_node(project_id, node_id)

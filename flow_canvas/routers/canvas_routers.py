# import moduls/libraries
import json
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pathlib import Path

# import form project
from flow_canvas.core.storage import get_store
from flow_canvas.schemas import (
    AnnotationUpdate, AttributeValueUpdate, CanvasStateRead, ConnectionLabel, NodeCreate, NodeQuickEdit, PointerEventRequest,
    ViewportUpdate, WheelEventRequest
)
from flow_canvas.services import ProjectCanvasCollaborator, ProjectServices, get_registry
from flow_canvas.visualization.canvas_visualization import scene_to_dict


# create Jinja2 template engine
templates = Jinja2Templates(directory=Path(__file__).parent.parent / "templates")

router = APIRouter()


def get_session(project_id: str, store=Depends(get_store), registry=Depends(get_registry)):
    """Open (or reuse) the canvas session of a project"""
    services = ProjectServices(store)
    services.get_project_by_id(project_id)
    return registry.get_session(project_id, lambda: ProjectCanvasCollaborator(services, project_id))


# load canvas page
@router.get("/{project_id}", response_class=HTMLResponse)
async def show_canvas(request: Request, project_id: str, session=Depends(get_session)):
    """Show the canvas as a plotly figure"""
    figure_html = session.figure().to_html(full_html=False, include_plotlyjs="cdn")
    return templates.TemplateResponse(
        request,
        "canvas.html",
        {
            "project_id": project_id,
            "figure_html": figure_html,
            "zoom_percent": session.transform.zoom_percent,
            "node_types": session.node_types,
        },
    )


# Canvas state (layout, connections, transform, selection)
@router.get("/{project_id}/state", response_model=CanvasStateRead)
async def get_state(session=Depends(get_session)):
    return session.state()


# Renderer output as JSON
@router.get("/{project_id}/scene", response_class=JSONResponse)
async def get_scene(session=Depends(get_session)):
    return JSONResponse(content=scene_to_dict(session.scene()))


# Plotly figure as JSON
@router.get("/{project_id}/figure")
async def get_figure(session=Depends(get_session)):
    return JSONResponse(content=json.loads(session.figure().to_json()))


# Pointer events
@router.post("/{project_id}/pointer/down")
async def pointer_down(event: PointerEventRequest, session=Depends(get_session)):
    """Pointer pressed. Picks pan / node drag / marquee / connection drag from what is under it"""
    return session.pointer_down(event.x, event.y, event.button)


@router.post("/{project_id}/pointer/move")
async def pointer_move(event: PointerEventRequest, session=Depends(get_session)):
    return session.pointer_move(event.x, event.y)


@router.post("/{project_id}/pointer/up")
async def pointer_up(event: PointerEventRequest, session=Depends(get_session)):
    """Pointer released. Commits drags and connection drops"""
    return session.pointer_up(event.x, event.y)


@router.post("/{project_id}/pointer/leave")
async def pointer_leave(event: PointerEventRequest, session=Depends(get_session)):
    return session.pointer_leave(event.x, event.y)


@router.post("/{project_id}/wheel")
async def wheel(event: WheelEventRequest, session=Depends(get_session)):
    """Zoom at the cursor"""
    return session.wheel(event.x, event.y, event.delta_y)


@router.post("/{project_id}/context")
async def context_click(event: PointerEventRequest, session=Depends(get_session)):
    """Right click: remove connection or open the annotation editor"""
    return session.context_click(event.x, event.y)


@router.put("/{project_id}/viewport")
async def set_viewport(viewport: ViewportUpdate, session=Depends(get_session)):
    session.set_viewport(viewport.width, viewport.height)
    return {"width": session.viewport_width, "height": session.viewport_height}


# Search and locate
@router.get("/{project_id}/search")
async def search(q: str = Query("", description="Part of the node name"), session=Depends(get_session)):
    """Find nodes by name (at most five)"""
    return [{"id": node.id, "name": node.name, "type_id": node.type_id} for node in session.search(q)]


@router.post("/{project_id}/locate/{node_id}")
async def locate(node_id: str, session=Depends(get_session)):
    """Center the view on a node and select it"""
    session.locate(node_id)
    return session.state()


# Nodes
@router.post("/{project_id}/nodes", status_code=201)
async def add_node(node: NodeCreate, session=Depends(get_session)):
    """Ask the project for a new node of the given type and place it on the canvas"""
    node_id = session.add_node(node.type_id)
    return {"id": node_id, "position": session.layout.get(node_id)}


@router.post("/{project_id}/nodes/{node_id}/collapse")
async def toggle_collapse(node_id: str, session=Depends(get_session)):
    return {"id": node_id, "collapsed": session.toggle_collapse(node_id)}


@router.put("/{project_id}/nodes/{node_id}/annotation")
async def set_annotation(node_id: str, annotation: AnnotationUpdate, session=Depends(get_session)):
    session.set_annotation(node_id, annotation.annotation)
    return session.get_node(node_id)


@router.patch("/{project_id}/nodes/{node_id}")
async def quick_edit(node_id: str, edit: NodeQuickEdit, session=Depends(get_session)):
    """Quick edit panel: name and section descriptions"""
    session.quick_edit(node_id, edit)
    return session.get_node(node_id)


@router.put("/{project_id}/nodes/{node_id}/attributes/{attribute_id}")
async def set_attribute(node_id: str, attribute_id: str, raw: AttributeValueUpdate, session=Depends(get_session)):
    """Quick edit panel: custom attribute value"""
    return session.set_attribute_value(node_id, attribute_id, raw)


@router.post("/{project_id}/nodes/{node_id}/detail")
async def open_detail(node_id: str, session=Depends(get_session)):
    """Leave the canvas for the full node editor"""
    url = session.open_detail(node_id)
    return RedirectResponse(url=url, status_code=303)


# Connections
@router.put("/{project_id}/connections/{connection_id}/label")
async def relabel_connection(connection_id: str, label: ConnectionLabel, session=Depends(get_session)):
    session.relabel_connection(connection_id, label.label)
    return session.connections.get(connection_id)


@router.delete("/{project_id}/connections/{connection_id}", status_code=204)
async def remove_connection(connection_id: str, session=Depends(get_session)):
    session.remove_connection(connection_id)

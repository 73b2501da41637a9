from flow_canvas.services.project_services import ProjectServices, ProjectCanvasCollaborator
from flow_canvas.services.canvas_services import CanvasSession, CanvasRegistry, get_registry

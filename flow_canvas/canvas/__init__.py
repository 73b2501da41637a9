from flow_canvas.canvas.transform import Transform
from flow_canvas.canvas.layout_store import LayoutStore
from flow_canvas.canvas.connection_store import ConnectionStore
from flow_canvas.canvas.selection import Selection, Marquee, marquee_hits
from flow_canvas.canvas.interaction import PointerController, PointerTarget, TargetKind, Mode, DragLine

import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from flow_canvas.schemas import (
    CanvasState, Chapter, ChapterCreate, Connection, NodeTypeConfig, Position, Project, ProjectCreate, PuzzleNode
)

logger = logging.getLogger(__name__)

DEFAULT_NODE_TYPE = NodeTypeConfig(id="type-puzzle", name="Puzzle", color="#6366f1")


class ProjectServices:
    """ Handles project, chapter and node records. Owner of the data the canvas displays"""

    def __init__(self, store):
        self.store = store

    # create project
    def create_project(self, project_data: ProjectCreate) -> Project:
        project = Project(
            id=f"proj-{uuid4().hex}",
            name=project_data.name,
            background_story=project_data.background_story or "",
            narrative_arc=project_data.narrative_arc or "",
            node_types=project_data.node_types or [DEFAULT_NODE_TYPE.model_copy()],
        )
        self.store.projects[project.id] = project
        self.store.touch(project.id)
        logger.info("Created project %s (%s)", project.name, project.id)
        return project

    # get one project by id
    def get_project_by_id(self, project_id: str) -> Project:
        project = self.store.projects.get(project_id)
        if not project:
            raise HTTPException(status_code=404, detail="Project not found")
        return project

    def revision(self, project_id: str) -> int:
        return self.store.revisions.get(project_id, 0)

    def add_chapter(self, project_id: str, chapter_data: ChapterCreate) -> Chapter:
        project = self.get_project_by_id(project_id)
        chapter = Chapter(id=f"ch-{uuid4().hex}", name=chapter_data.name, description=chapter_data.description or "")
        project.chapters.append(chapter)
        self.store.touch(project_id)
        return chapter

    def add_node_type(self, project_id: str, node_type: NodeTypeConfig) -> NodeTypeConfig:
        project = self.get_project_by_id(project_id)
        project.node_types = [t for t in project.node_types if t.id != node_type.id] + [node_type]
        self.store.touch(project_id)
        return node_type

    def get_node_type(self, project_id: str, type_id: str) -> NodeTypeConfig:
        project = self.get_project_by_id(project_id)
        for node_type in project.node_types:
            if node_type.id == type_id:
                return node_type
        raise HTTPException(status_code=404, detail="Node type not found")

    # nodes of all chapters, in chapter order
    def list_nodes(self, project_id: str) -> List[PuzzleNode]:
        project = self.get_project_by_id(project_id)
        return [puzzle for chapter in project.chapters for puzzle in chapter.puzzles]

    def get_node(self, project_id: str, node_id: str) -> PuzzleNode:
        for node in self.list_nodes(project_id):
            if node.id == node_id:
                return node
        raise HTTPException(status_code=404, detail="Node not found")

    def create_node(self, project_id: str, type_id: str, chapter_id: Optional[str] = None) -> PuzzleNode:
        """New empty node of the given type, appended to the chapter (first chapter by default)"""
        project = self.get_project_by_id(project_id)
        node_type = self.get_node_type(project_id, type_id)

        if not project.chapters:
            project.chapters.append(Chapter(id=f"ch-{uuid4().hex}", name="Chapter 1"))
        chapter = next((c for c in project.chapters if c.id == chapter_id), project.chapters[0])

        node = PuzzleNode(id=f"pz-{uuid4().hex}", name=f"New {node_type.name}", type_id=node_type.id)
        chapter.puzzles.append(node)
        self.store.touch(project_id)
        logger.info("Created node %s in chapter %s", node.id, chapter.id)
        return node

    def update_node(self, project_id: str, node_id: str, partial_update: Dict[str, Any]) -> PuzzleNode:
        """Apply a partial update coming from the canvas quick edit panel or annotation editor"""
        project = self.get_project_by_id(project_id)
        node = self.get_node(project_id, node_id)
        update = dict(partial_update)
        update.pop("id", None)

        data = node.model_dump()
        mechanics_description = update.pop("mechanics_description", None)
        if mechanics_description is not None:
            data["mechanics"]["mechanics_description"] = mechanics_description
        if "custom_attribute_values" in update:
            update["custom_attribute_values"] = [
                v.model_dump() if hasattr(v, "model_dump") else v for v in update["custom_attribute_values"]
            ]
        updated = PuzzleNode.model_validate({**data, **update})

        # swap the record in its chapter
        for chapter in project.chapters:
            for index, puzzle in enumerate(chapter.puzzles):
                if puzzle.id == node_id:
                    chapter.puzzles[index] = updated

        self.store.touch(project_id)
        logger.info("Updated node %s: %s", node_id, sorted(partial_update))
        return updated

    def get_canvas_state(self, project_id: str) -> CanvasState:
        return self.get_project_by_id(project_id).canvas_state.model_copy(deep=True)

    def save_canvas_state(self, project_id: str, positions: Dict[str, Position], connections: List[Connection]):
        project = self.get_project_by_id(project_id)
        project.canvas_state = CanvasState(positions=positions, connections=connections)
        logger.info("Saved canvas layout of %s (%d positions, %d connections)",
                    project_id, len(positions), len(connections))


class ProjectCanvasCollaborator:
    """ Binds the canvas callbacks to one project"""

    def __init__(self, services: ProjectServices, project_id: str):
        self.services = services
        self.project_id = project_id
        self.detail_requests: List[str] = []

    def revision(self) -> int:
        return self.services.revision(self.project_id)

    def canvas_state(self) -> CanvasState:
        return self.services.get_canvas_state(self.project_id)

    def list_nodes(self) -> List[PuzzleNode]:
        return self.services.list_nodes(self.project_id)

    def list_node_types(self) -> List[NodeTypeConfig]:
        return list(self.services.get_project_by_id(self.project_id).node_types)

    def on_layout_change(self, positions: Dict[str, Position], connections: List[Connection]):
        self.services.save_canvas_state(self.project_id, positions, connections)

    def on_request_new_node(self, type_id: str) -> str:
        return self.services.create_node(self.project_id, type_id).id

    def on_node_content_change(self, node_id: str, partial_update: Dict[str, Any]):
        self.services.update_node(self.project_id, node_id, partial_update)

    def on_request_open_detail(self, node_id: str) -> str:
        self.services.get_node(self.project_id, node_id)
        self.detail_requests.append(node_id)
        return f"/projects/{self.project_id}/nodes/{node_id}"

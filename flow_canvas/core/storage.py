from typing import Dict

from flow_canvas.schemas import Project


class ProjectStore:
    """ In-process holder of projects. Durable persistence is left to whoever embeds the app"""

    def __init__(self):
        self.projects: Dict[str, Project] = {}
        self.revisions: Dict[str, int] = {}

    def touch(self, project_id: str):
        """Bump the revision so open canvases reload their node list"""
        self.revisions[project_id] = self.revisions.get(project_id, 0) + 1

    def clear(self):
        self.projects.clear()
        self.revisions.clear()


store = ProjectStore()


def get_store():
    return store

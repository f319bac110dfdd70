"""Workspace: the set of projects and the selected one.

Only the selected project's filters are evaluated. The workspace is the
glue the host calls on document and filter events; debouncing those events
is the host's job.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from logfocus.core.cache import LineRange
from logfocus.core.color import ColorAllocator
from logfocus.core.compositor import ViewCompositor
from logfocus.core.config import Config
from logfocus.core.filter import DecorationSink, EvaluationResult
from logfocus.core.project import Project, ProjectError, Target, valid_project_name
from logfocus.core.storage import ProjectStore, write_project_file
from logfocus.models.document import DocumentSnapshot

log = logging.getLogger("logfocus.workspace")

DEFAULT_PROJECT_NAME = "NONAME"


class Workspace:
    """Projects, the selected project and the views derived from it.

    Args:
        config: Limits handed to every project.
        sink: Rendering collaborator handed to every project.
        store: Optional persistence; when set, mutations are saved.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        sink: Optional[DecorationSink] = None,
        store: Optional[ProjectStore] = None,
    ):
        self.config = config or Config()
        self.sink = sink
        self.store = store
        self.allocator = ColorAllocator()
        self.compositor = ViewCompositor()
        self.projects: dict[str, Project] = {}
        self.selected: Optional[Project] = None

    def load(self) -> None:
        """Replace the projects with the stored ones, creating a default if none exist."""
        if self.store is None:
            raise ProjectError("Workspace has no project store")
        projects, selected = self.store.load_all()
        for project in self.projects.values():
            project.dispose()
        self.projects = projects
        self.selected = selected
        self.ensure_default_project()

    def save(self) -> None:
        if self.store is not None:
            self.store.save_all(self.projects, self.selected)

    def new_project(self, name: str) -> Project:
        return Project(name, config=self.config, allocator=self.allocator, sink=self.sink)

    def add_project(self, name: str) -> Project:
        """Create an empty project.

        Raises:
            ProjectError: If the name is invalid or already used.
        """
        self._check_new_name(name)
        project = self.new_project(name)
        self.projects[name] = project
        self.save()
        return project

    def import_project(self, src: Path) -> Project:
        """Copy a project file into the store and add it to the workspace.

        A name clash is resolved with a numeric suffix.

        Raises:
            ProjectError: If the workspace has no store.
            StorageError: If the file is not a valid project.
        """
        if self.store is None:
            raise ProjectError("Workspace has no project store")
        project = self.store.import_project(Path(src), set(self.projects))
        self.projects[project.name] = project
        log.info("imported project %s from %s", project.name, src)
        self.save()
        return project

    def export_project(self, name: str, dest: Path) -> Path:
        """Write a project to a JSON file outside the store."""
        return write_project_file(self.get_project(name), dest)

    def rename_project(self, old_name: str, new_name: str) -> Project:
        project = self.get_project(old_name)
        self._check_new_name(new_name)
        if self.store is not None:
            self.store.delete_project(project)
        del self.projects[old_name]
        project.name = new_name
        project.id = new_name
        self.projects[new_name] = project
        self.save()
        return project

    def delete_project(self, name: str) -> None:
        project = self.get_project(name)
        project.dispose()
        del self.projects[name]
        if self.store is not None:
            self.store.delete_project(project)
        if project is self.selected:
            self.selected = next(iter(self.projects.values()), None)
            if self.selected is not None:
                self.selected.selected = True
        self.save()

    def select_project(self, name: str) -> Project:
        """Make a project the selected one and deactivate the previous one."""
        project = self.get_project(name)
        if project is self.selected:
            return project

        previous = self.selected
        if previous is not None:
            previous.selected = False
            previous.deactivate()
        project.selected = True
        self.selected = project
        log.info("selected project %s", name)
        self.save()
        return project

    def ensure_default_project(self) -> Project:
        """Create and select the default project when there are no projects."""
        if not self.projects:
            project = self.new_project(DEFAULT_PROJECT_NAME)
            self.projects[project.name] = project
            self.selected = project
            project.selected = True
            self.save()
        if self.selected is None:
            self.selected = next(iter(self.projects.values()))
            self.selected.selected = True
        return self.selected

    def get_project(self, name: str) -> Project:
        try:
            return self.projects[name]
        except KeyError:
            raise ProjectError(f"Project {name!r} not found") from None

    def refresh(
        self,
        documents: Iterable[DocumentSnapshot],
        active_id: Optional[str] = None,
    ) -> dict[str, dict[str, EvaluationResult]]:
        """Evaluate every filter of the selected project on every document.

        Args:
            documents: Visible documents.
            active_id: Id of the active document; its counts become the
                filters' live counts.

        Returns:
            Results keyed by document id, then filter id.
        """
        results: dict[str, dict[str, EvaluationResult]] = {}
        if self.selected is None:
            return results
        for snapshot in documents:
            selected = snapshot.document_id == active_id
            results[snapshot.document_id] = {
                filt.id: filt.evaluate(snapshot, selected=selected)
                for filt in self.selected.filters.values()
            }
        return results

    def set_shown(self, item_id: str, value: bool) -> None:
        """Toggle focus-view membership of a group or filter of the selected project.

        Args:
            item_id: Group or filter id as shown in the host's tree.
            value: New flag value; a group passes it on to its filters.
        """
        self._selected_project().set_shown(Target.parse(item_id), value)
        self.save()

    def set_highlighted(self, item_id: str, value: bool) -> None:
        """Toggle decoration of a group or filter of the selected project."""
        self._selected_project().set_highlighted(Target.parse(item_id), value)
        self.save()

    def close_document(self, document_id: str) -> None:
        for project in self.projects.values():
            for filt in project.filters.values():
                filt.remove_document(document_id)

    def visible_lines(self, snapshot: DocumentSnapshot) -> list[int]:
        return self.compositor.mapper(self.selected, snapshot).visible_lines

    def focus_snapshot(self, snapshot: DocumentSnapshot) -> DocumentSnapshot:
        return self.compositor.focus_snapshot(self.selected, snapshot)

    def focus_decorations(
        self,
        snapshot: DocumentSnapshot,
        focus: Optional[DocumentSnapshot] = None,
    ) -> dict[str, list[LineRange]]:
        return self.compositor.focus_decorations(self.selected, snapshot, focus)

    def _selected_project(self) -> Project:
        if self.selected is None:
            raise ProjectError("No project is selected")
        return self.selected

    def _check_new_name(self, name: str) -> None:
        if not valid_project_name(name):
            raise ProjectError(f"Invalid project name {name!r}")
        if name in self.projects:
            raise ProjectError(f"Project name {name!r} already exists")

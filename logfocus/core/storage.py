"""Project persistence.

Layout under the storage root::

    logfocus_settings.json      index: project file names and the selected project
    projects/<name>.json        one file per project

Project files hold the serializable shape from
:mod:`logfocus.models.filter_def`; live projects are rebuilt from it.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from logfocus.core.color import ColorAllocator
from logfocus.core.config import Config
from logfocus.core.filter import DecorationSink
from logfocus.core.project import Project, valid_project_name
from logfocus.models.filter_def import ProjectDefinition

log = logging.getLogger("logfocus.storage")

INDEX_FILE = "logfocus_settings.json"
PROJECTS_DIR = "projects"


class StorageError(Exception):
    """Raised when a project or index file cannot be read or parsed.

    Attributes:
        path: File that failed.
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(f"Error in {path}: {message}" if path else message)


class StoreIndex(BaseModel):
    """Contents of the index file."""

    model_config = ConfigDict(populate_by_name=True)

    project_file_names: list[str] = Field(default_factory=list, alias="projectFileNames")
    version: str = "1.0.0"
    selected_project_name: Optional[str] = Field(default=None, alias="selectedProjectName")


def project_file_name(project: Project) -> str:
    return f"{project.name}.json"


def write_project_file(project: Project, dest: Path) -> Path:
    """Write a project to an arbitrary JSON file."""
    dest = Path(dest)
    dest.write_text(project.to_definition().model_dump_json(by_alias=True, indent=4), encoding="utf-8")
    return dest


def _definition_hash(definition: ProjectDefinition) -> str:
    return hashlib.sha256(definition.model_dump_json(by_alias=True).encode("utf-8")).hexdigest()


class ProjectStore:
    """Reads and writes projects under a storage root.

    Args:
        root: Storage directory; created on first write.
        config: Limits for filters of loaded projects.
        allocator: Color allocator for loaded filters without a color.
        sink: Rendering collaborator for loaded filters.
    """

    def __init__(
        self,
        root: Path,
        *,
        config: Optional[Config] = None,
        allocator: Optional[ColorAllocator] = None,
        sink: Optional[DecorationSink] = None,
    ):
        self.root = Path(root)
        self._config = config
        self._allocator = allocator or ColorAllocator()
        self._sink = sink
        # project name -> hash of its last saved or loaded definition
        self._hashes: dict[str, str] = {}

    @property
    def index_path(self) -> Path:
        return self.root / INDEX_FILE

    def project_path(self, file_name: str) -> Path:
        return self.root / PROJECTS_DIR / file_name

    def read_index(self) -> StoreIndex:
        """Read the index, falling back to an empty one if missing or unreadable."""
        if not self.index_path.exists():
            return StoreIndex()
        try:
            return StoreIndex.model_validate_json(self.index_path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            log.error("failed to read %s: %s", self.index_path, e)
            return StoreIndex()

    def write_index(self, index: StoreIndex) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self.index_path.write_text(index.model_dump_json(by_alias=True, indent=2), encoding="utf-8")

    def save_project(self, project: Project) -> Path:
        definition = project.to_definition()
        path = self.project_path(project_file_name(project))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(definition.model_dump_json(by_alias=True, indent=4), encoding="utf-8")
        self._hashes[project.name] = _definition_hash(definition)
        return path

    def load_project(self, file_name: str) -> Optional[Project]:
        """Load one project file.

        Returns:
            The project, or None if the file does not exist.

        Raises:
            StorageError: If the file is not a valid project.
        """
        path = self.project_path(file_name)
        if not path.exists():
            log.warning("project file not found: %s", path)
            return None
        definition = self._read_definition(path)
        self._hashes[definition.name] = _definition_hash(definition)
        return self._build(definition)

    def delete_project(self, project: Project) -> None:
        path = self.project_path(project_file_name(project))
        if path.exists():
            path.unlink()
        self._hashes.pop(project.name, None)

    def load_all(self) -> tuple[dict[str, Project], Optional[Project]]:
        """Load every indexed project.

        Unreadable or missing project files are dropped from the index. The
        selected project is the one named in the index, else the first one.

        Returns:
            (projects by name, selected project or None)
        """
        index = self.read_index()
        projects: dict[str, Project] = {}
        selected: Optional[Project] = None
        dropped = 0

        for file_name in index.project_file_names:
            try:
                project = self.load_project(file_name)
            except StorageError as e:
                log.error("%s", e)
                project = None
            if project is None:
                dropped += 1
                continue
            projects[project.name] = project
            if file_name == index.selected_project_name:
                selected = project

        if selected is None and projects:
            selected = next(iter(projects.values()))
        if selected is not None:
            selected.selected = True

        if dropped or (selected and index.selected_project_name != project_file_name(selected)):
            self.save_all(projects, selected)
        return projects, selected

    def save_all(self, projects: dict[str, Project], selected: Optional[Project]) -> None:
        """Write changed projects and refresh the index.

        Files of projects no longer present are deleted.
        """
        for project in projects.values():
            definition = project.to_definition()
            if self._hashes.get(project.name) != _definition_hash(definition):
                self.save_project(project)

        index = self.read_index()
        file_names = [project_file_name(p) for p in projects.values()]
        for stale in set(index.project_file_names) - set(file_names):
            path = self.project_path(stale)
            if path.exists():
                path.unlink()
                log.info("removed project file %s", path)

        index.project_file_names = file_names
        index.selected_project_name = project_file_name(selected) if selected else None
        self.write_index(index)

    def export_project(self, project: Project, dest: Path) -> Path:
        return write_project_file(project, dest)

    def import_project(self, src: Path, existing_names: set[str]) -> Project:
        """Read a project file from outside the store and save it into the store.

        A name already in ``existing_names`` gets a ``_1``, ``_2`` ... suffix.

        Raises:
            StorageError: If the file is not a valid project or its name
                cannot be used as a file name.
        """
        definition = self._read_definition(Path(src))
        base = definition.name
        name = base
        counter = 1
        while name in existing_names:
            name = f"{base}_{counter}"
            counter += 1
        definition = definition.model_copy(update={"name": name})

        project = self._build(definition)
        self.save_project(project)
        return project

    def _read_definition(self, path: Path) -> ProjectDefinition:
        try:
            definition = ProjectDefinition.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StorageError(str(e), path=path) from e
        except ValidationError as e:
            raise StorageError(f"invalid project file: {e}", path=path) from e
        # the name becomes a file name under projects/
        if not valid_project_name(definition.name):
            raise StorageError(f"invalid project name {definition.name!r}", path=path)
        return definition

    def _build(self, definition: ProjectDefinition) -> Project:
        return Project.from_definition(
            definition,
            config=self._config,
            allocator=self._allocator,
            sink=self._sink,
        )

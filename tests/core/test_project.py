"""Tests for Project, Group and Target."""

import pytest

from logfocus.core.matcher import InvalidPatternError
from logfocus.core.project import Project, ProjectError, Target, TargetKind, valid_project_name
from logfocus.models.document import DocumentSnapshot


@pytest.fixture
def project():
    return Project("demo")


class TestTarget:
    """Tests for resolving tree item ids."""

    def test_parse_group(self):
        assert Target.parse("group-1-abc") == Target(TargetKind.GROUP, "group-1-abc")

    def test_parse_filter(self):
        assert Target.parse("filter-1-abc").kind is TargetKind.FILTER

    def test_parse_unknown(self):
        with pytest.raises(ProjectError):
            Target.parse("project-1-abc")


class TestGroups:
    """Tests for group management."""

    def test_add_group(self, project):
        group = project.add_group("errors")
        assert project.groups[group.id] is group
        assert group.id.startswith("group-")
        assert group.filter_ids == []

    def test_rename_group(self, project):
        group = project.add_group("old")
        project.rename_group(group.id, "new")
        assert group.name == "new"

    def test_delete_group_disposes_members(self, project):
        group = project.add_group("g")
        filt = project.add_filter(group.id, "ERROR")
        project.delete_group(group.id)

        assert group.id not in project.groups
        assert filt.id not in project.filters
        assert filt.disposed

    def test_unknown_group(self, project):
        with pytest.raises(ProjectError):
            project.delete_group("group-missing")


class TestFilters:
    """Tests for filter management."""

    def test_add_filter(self, project):
        group = project.add_group("g")
        filt = project.add_filter(group.id, "ERROR")

        assert project.filters[filt.id] is filt
        assert group.filter_ids == [filt.id]
        assert project.group_of(filt.id) is group

    def test_add_filter_invalid_pattern(self, project):
        group = project.add_group("g")
        with pytest.raises(InvalidPatternError):
            project.add_filter(group.id, "(oops")

        assert project.filters == {}
        assert group.filter_ids == []

    def test_add_filter_unknown_group(self, project):
        with pytest.raises(ProjectError):
            project.add_filter("group-missing", "x")

    def test_new_filters_get_distinct_hues(self, project):
        group = project.add_group("g")
        a = project.add_filter(group.id, "a")
        b = project.add_filter(group.id, "b")
        assert a.colors.hue != b.colors.hue

    def test_edit_filter(self, project):
        group = project.add_group("g")
        filt = project.add_filter(group.id, "ERROR")
        assert project.edit_filter(filt.id, "WARN") is True
        assert filt.pattern == "WARN"

    def test_delete_filter(self, project):
        group = project.add_group("g")
        filt = project.add_filter(group.id, "ERROR")
        filt.evaluate(DocumentSnapshot(document_id="d", text="ERROR"))

        project.delete_filter(filt.id)

        assert project.filters == {}
        assert group.filter_ids == []
        assert filt.disposed
        assert len(filt.cache) == 0


class TestBroadcast:
    """Group flags are copied onto members once."""

    def test_group_shown_broadcasts(self, project):
        group = project.add_group("g")
        a = project.add_filter(group.id, "a")
        b = project.add_filter(group.id, "b")

        project.set_shown(Target.group(group.id), False)

        assert group.shown is False
        assert a.shown is False and b.shown is False

    def test_group_flag_not_consulted_afterwards(self, project):
        group = project.add_group("g")
        a = project.add_filter(group.id, "a")
        project.set_highlighted(Target.group(group.id), False)

        project.set_highlighted(Target.filter(a.id), True)
        later = project.add_filter(group.id, "later")

        assert a.highlighted is True
        assert later.highlighted is True
        assert group.highlighted is False

    def test_filter_target_only_changes_filter(self, project):
        group = project.add_group("g")
        a = project.add_filter(group.id, "a")
        b = project.add_filter(group.id, "b")

        project.set_shown(Target.filter(a.id), False)

        assert a.shown is False
        assert b.shown is True
        assert group.shown is True

    def test_set_exclude(self, project):
        group = project.add_group("g")
        a = project.add_filter(group.id, "a")
        project.set_exclude(a.id, True)
        assert a.exclude is True


class TestDefinitions:
    """A project can be rebuilt from its serializable shape."""

    def test_round_trip(self, project):
        group = project.add_group("problems")
        project.add_filter(group.id, "ERROR", "hsl(0, 40%, 80%)")
        project.add_filter(group.id, "DEBUG", "hsl(200, 40%, 80%)", exclude=True, shown=False)

        rebuilt = Project.from_definition(project.to_definition())

        assert rebuilt.name == "demo"
        assert rebuilt.to_definition() == project.to_definition()
        (rebuilt_group,) = rebuilt.groups.values()
        patterns = [rebuilt.filters[fid].pattern for fid in rebuilt_group.filter_ids]
        assert patterns == ["ERROR", "DEBUG"]


def test_dispose_project(project):
    group = project.add_group("g")
    a = project.add_filter(group.id, "a")
    project.dispose()
    assert a.disposed


@pytest.mark.parametrize("name,ok", [
    ("my project", True),
    ("", False),
    ("a/b", False),
    ("what?", False),
    ("tab\there", False),
])
def test_valid_project_name(name, ok):
    assert valid_project_name(name) is ok

"""Tests for LineIndexMapper."""

from logfocus.core.cache import LineRange
from logfocus.core.index_map import LineIndexMapper


class TestLineIndexMapper:
    """Tests for mapping between original and focus line numbers."""

    def test_round_trip_for_visible_lines(self):
        mapper = LineIndexMapper([2, 5, 7])
        for original in [2, 5, 7]:
            assert mapper.to_original(mapper.to_focus(original)) == original

    def test_first_visible_line_is_after_header(self):
        mapper = LineIndexMapper([2, 5, 7])
        assert mapper.to_focus(2) == 1
        assert mapper.to_focus(7) == 3

    def test_hidden_line_has_no_mapping(self):
        mapper = LineIndexMapper([2, 5, 7])
        assert mapper.to_focus(3) is None
        assert mapper.to_focus(100) is None

    def test_header_and_out_of_range_focus_lines(self):
        mapper = LineIndexMapper([2, 5, 7])
        assert mapper.to_original(0) is None
        assert mapper.to_original(4) is None

    def test_empty_sequence(self):
        mapper = LineIndexMapper([])
        assert len(mapper) == 0
        assert mapper.to_focus(0) is None

    def test_project_lines_drops_hidden(self):
        mapper = LineIndexMapper([2, 5, 7])
        assert mapper.project_lines([1, 2, 6, 7]) == [1, 3]

    def test_project_ranges(self):
        mapper = LineIndexMapper([2, 5, 7])
        ranges = [LineRange(2, 2), LineRange(3, 3), LineRange(4, 7)]

        assert mapper.project_ranges(ranges) == [
            LineRange(1, 1),
            LineRange(2, 2),
            LineRange(3, 3),
        ]

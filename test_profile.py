"""
test_profile.py

Tests for the call-tree profile builder.
Validates:
- Self and total weights on nodes and frames
- Call-tree merging and executed-code annotations
- Builder contract errors
"""

import pytest

from zshprof.errors import (
    EmptyStackError,
    FrameMismatchError,
    ProfileBuildError,
    TimeReversalError,
    UnbalancedStackError,
)
from zshprof.profile import CallTreeProfileBuilder, FrameInfo, Profile, ProfileBuilder, ProfileGroup


MAIN = FrameInfo(key=0, name="main", file="s.sh", line=1)
FOO = FrameInfo(key=1, name="foo", file="s.sh", line=5)
BAR = FrameInfo(key=2, name="bar", file="s.sh", line=9)


@pytest.fixture
def simple_profile() -> Profile:
    """main [0, 10] calling foo [1, 4] and foo again [6, 8]."""
    builder = CallTreeProfileBuilder(10.0)
    builder.enter_frame(MAIN, 0.0, "main")
    builder.enter_frame(FOO, 1.0, "foo first")
    builder.leave_frame(FOO, 4.0)
    builder.enter_frame(FOO, 6.0, "foo second")
    builder.leave_frame(FOO, 8.0)
    builder.leave_frame(MAIN, 10.0)
    return builder.build()


class TestWeights:
    """Weights derived from enter/leave values."""

    def test_total_weight(self, simple_profile: Profile):
        assert simple_profile.total_weight == 10.0
        assert simple_profile.root.total_weight == 10.0

    def test_frame_weights(self, simple_profile: Profile):
        weights = {f.name: (f.self_weight, f.total_weight) for f in simple_profile.frames}
        assert weights == {"main": (5.0, 10.0), "foo": (5.0, 5.0)}

    def test_repeated_calls_merge_into_one_node(self, simple_profile: Profile):
        (main_node,) = simple_profile.root.children
        (foo_node,) = main_node.children
        assert foo_node.frame.name == "foo"
        assert foo_node.total_weight == 5.0
        assert foo_node.executed_code == ["foo first", "foo second"]
        assert main_node.executed_code == ["main"]

    def test_recursion_counts_frame_once(self):
        builder = CallTreeProfileBuilder()
        builder.enter_frame(FOO, 0.0)
        builder.enter_frame(FOO, 1.0)
        builder.leave_frame(FOO, 3.0)
        builder.leave_frame(FOO, 4.0)
        profile = builder.build()

        (frame,) = profile.frames
        assert frame.total_weight == 4.0
        assert frame.self_weight == 4.0
        outer = profile.root.children[0]
        assert outer.total_weight == 4.0
        assert outer.children[0].total_weight == 2.0

    def test_zero_duration_frames(self):
        builder = CallTreeProfileBuilder(0.0)
        builder.enter_frame(MAIN, 0.0)
        builder.enter_frame(FOO, 0.0)
        builder.leave_frame(FOO, 0.0)
        builder.leave_frame(MAIN, 0.0)
        profile = builder.build()
        assert profile.total_weight == 0.0
        assert [n.frame.name for n in profile.walk()] == ["main", "foo"]

    def test_value_total_is_lower_bound(self):
        builder = CallTreeProfileBuilder(1.0)
        builder.enter_frame(MAIN, 0.0)
        builder.leave_frame(MAIN, 3.0)
        assert builder.build().total_weight == 3.0


class TestTraversal:
    """Read access to the finished profile."""

    def test_walk_is_preorder(self):
        builder = CallTreeProfileBuilder()
        builder.enter_frame(MAIN, 0.0)
        builder.enter_frame(FOO, 1.0)
        builder.enter_frame(BAR, 2.0)
        builder.leave_frame(BAR, 3.0)
        builder.leave_frame(FOO, 4.0)
        builder.enter_frame(BAR, 5.0)
        builder.leave_frame(BAR, 6.0)
        builder.leave_frame(MAIN, 7.0)
        profile = builder.build()

        walked = [(n.frame.name, n.depth) for n in profile.walk()]
        assert walked == [("main", 0), ("foo", 1), ("bar", 2), ("bar", 1)]

    def test_top_frames(self, simple_profile: Profile):
        top = simple_profile.top_frames(1)
        assert len(top) == 1
        assert top[0].self_weight == 5.0

    def test_group_active_profile(self, simple_profile: Profile):
        group = ProfileGroup(name="trace.log", profiles=(simple_profile,))
        assert group.index_to_view == 0
        assert group.active_profile is simple_profile

    def test_empty_profile(self):
        profile = CallTreeProfileBuilder(0.0).build()
        assert profile.total_weight == 0.0
        assert profile.frames == ()
        assert list(profile.walk()) == []


class TestContract:
    """Violations of strict nesting."""

    def test_leave_on_empty_stack(self):
        builder = CallTreeProfileBuilder()
        with pytest.raises(EmptyStackError) as exc_info:
            builder.leave_frame(MAIN, 1.0)
        assert exc_info.value.error_code == "E201"

    def test_leave_wrong_frame(self):
        builder = CallTreeProfileBuilder()
        builder.enter_frame(MAIN, 0.0)
        builder.enter_frame(FOO, 1.0)
        with pytest.raises(FrameMismatchError) as exc_info:
            builder.leave_frame(MAIN, 2.0)
        assert exc_info.value.top_name == "foo"

    def test_build_with_open_frames(self):
        builder = CallTreeProfileBuilder()
        builder.enter_frame(MAIN, 0.0)
        builder.enter_frame(FOO, 1.0)
        with pytest.raises(UnbalancedStackError) as exc_info:
            builder.build()
        assert exc_info.value.open_frames == ["main", "foo"]

    def test_time_reversal(self):
        builder = CallTreeProfileBuilder()
        builder.enter_frame(MAIN, 2.0)
        with pytest.raises(TimeReversalError):
            builder.enter_frame(FOO, 1.0)

    def test_errors_share_base(self):
        assert issubclass(TimeReversalError, ProfileBuildError)
        assert issubclass(EmptyStackError, ProfileBuildError)

    def test_interface_is_abstract(self):
        with pytest.raises(NotImplementedError):
            ProfileBuilder().build()

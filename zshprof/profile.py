"""
profile.py

Call-tree profile model and the builder that materializes it from a
stream of enter/leave calls.

 ProfileBuilder: the enter/leave/build interface the importer replays into.
 CallTreeProfileBuilder: builds a merged call tree with self/total weights.
 Profile: the finished, read-only call tree.
 ProfileGroup: one or more profiles plus the index of the one to show.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from zshprof.errors import (
    EmptyStackError,
    FrameMismatchError,
    TimeReversalError,
    UnbalancedStackError,
)

FrameKey = Union[int, str]


@dataclass(frozen=True)
class FrameInfo:
    """Identity of a frame as passed to the builder."""
    key: FrameKey
    name: str
    file: str = ""
    line: int = 0


@dataclass
class ProfileFrame:
    """A frame of the finished profile with weights summed over the tree."""
    info: FrameInfo
    self_weight: float = 0.0
    total_weight: float = 0.0

    @property
    def key(self) -> FrameKey:
        return self.info.key

    @property
    def name(self) -> str:
        return self.info.name


@dataclass(eq=False)
class CallTreeNode:
    """A node of the merged call tree. The root has no frame."""
    frame: Optional[ProfileFrame]
    parent: Optional["CallTreeNode"] = field(default=None, repr=False)
    children: List["CallTreeNode"] = field(default_factory=list)
    self_weight: float = 0.0
    total_weight: float = 0.0
    executed_code: List[str] = field(default_factory=list)

    def child_for(self, frame: ProfileFrame) -> Optional["CallTreeNode"]:
        for child in self.children:
            if child.frame is frame:
                return child
        return None

    @property
    def depth(self) -> int:
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth - 1 if self.frame is not None else -1


class Profile:
    """
    A finished call-tree profile.

    Built by CallTreeProfileBuilder; the name can be changed afterwards,
    everything else is read-only.
    """

    __slots__ = ('name', '_unit', '_total_weight', '_root', '_frames')

    def __init__(
        self,
        root: CallTreeNode,
        frames: Tuple[ProfileFrame, ...],
        total_weight: float,
        unit: str = "seconds",
        name: str = "",
    ):
        self.name = name
        self._unit = unit
        self._total_weight = total_weight
        self._root = root
        self._frames = frames

    @property
    def unit(self) -> str:
        return self._unit

    @property
    def total_weight(self) -> float:
        return self._total_weight

    @property
    def root(self) -> CallTreeNode:
        return self._root

    @property
    def frames(self) -> Tuple[ProfileFrame, ...]:
        return self._frames

    def walk(self) -> Iterator[CallTreeNode]:
        """Pre-order traversal of the call tree, root excluded."""
        stack = list(reversed(self._root.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def top_frames(self, limit: int = 10) -> List[ProfileFrame]:
        """Frames ordered by self weight, heaviest first."""
        ordered = sorted(self._frames, key=lambda f: (-f.self_weight, -f.total_weight))
        return ordered[:limit]

    def to_dict(self) -> Dict[str, Any]:
        """Summary dictionary of the profile."""
        return {
            "name": self.name,
            "unit": self._unit,
            "total_weight": self._total_weight,
            "frames": [
                {
                    "name": f.name,
                    "file": f.info.file,
                    "line": f.info.line,
                    "self": f.self_weight,
                    "total": f.total_weight,
                }
                for f in self._frames
            ],
        }

    def __repr__(self) -> str:
        return f"Profile(name={self.name!r}, frames={len(self._frames)}, total={self._total_weight})"


@dataclass(frozen=True)
class ProfileGroup:
    """Profiles imported from one file."""
    name: str
    profiles: Tuple[Profile, ...]
    index_to_view: int = 0

    @property
    def active_profile(self) -> Profile:
        return self.profiles[self.index_to_view]


class ProfileBuilder:
    """Interface replayed into by the importer. Calls must be strictly nested."""

    def enter_frame(self, frame: FrameInfo, value: float, executed_code: Optional[str] = None) -> None:
        raise NotImplementedError

    def leave_frame(self, frame: FrameInfo, value: float) -> None:
        raise NotImplementedError

    def build(self) -> Profile:
        raise NotImplementedError


class CallTreeProfileBuilder(ProfileBuilder):
    """
    Builds a call tree from enter/leave calls at increasing values.

    Every interval between two calls is added to the total weight of each
    node on the stack and to the self weight of the top node. Per-frame
    totals count a recursive frame once per interval.

    Example:
        builder = CallTreeProfileBuilder(3.0)
        builder.enter_frame(main, 0.0)
        builder.enter_frame(child, 1.0)
        builder.leave_frame(child, 2.0)
        builder.leave_frame(main, 3.0)
        profile = builder.build()
    """

    def __init__(self, value_total: float = 0.0, unit: str = "seconds"):
        self.value_total = value_total
        self.unit = unit
        self._root = CallTreeNode(frame=None)
        self._stack: List[CallTreeNode] = [self._root]
        self._frames: Dict[FrameKey, ProfileFrame] = {}
        self._last_value = 0.0

    def _frame_for(self, info: FrameInfo) -> ProfileFrame:
        frame = self._frames.get(info.key)
        if frame is None:
            frame = ProfileFrame(info)
            self._frames[info.key] = frame
        return frame

    def _add_weights(self, value: float) -> None:
        if value < self._last_value:
            raise TimeReversalError(value, self._last_value)
        delta = value - self._last_value
        self._last_value = value
        if delta == 0:
            return

        counted = set()
        for node in self._stack:
            node.total_weight += delta
            if node.frame is not None and node.frame.key not in counted:
                counted.add(node.frame.key)
                node.frame.total_weight += delta

        top = self._stack[-1]
        top.self_weight += delta
        if top.frame is not None:
            top.frame.self_weight += delta

    def enter_frame(self, frame: FrameInfo, value: float, executed_code: Optional[str] = None) -> None:
        self._add_weights(value)

        profile_frame = self._frame_for(frame)
        parent = self._stack[-1]
        node = parent.child_for(profile_frame)
        if node is None:
            node = CallTreeNode(frame=profile_frame, parent=parent)
            parent.children.append(node)
        if executed_code is not None:
            node.executed_code.append(executed_code)
        self._stack.append(node)

    def leave_frame(self, frame: FrameInfo, value: float) -> None:
        if len(self._stack) == 1:
            raise EmptyStackError(frame.name, value)
        top = self._stack[-1]
        if top.frame.key != frame.key:
            raise FrameMismatchError(frame.name, top.frame.name, value)

        self._add_weights(value)
        self._stack.pop()

    def build(self) -> Profile:
        if len(self._stack) > 1:
            raise UnbalancedStackError([node.frame.name for node in self._stack[1:]])

        total = max(self.value_total, self._root.total_weight)
        return Profile(
            root=self._root,
            frames=tuple(self._frames.values()),
            total_weight=total,
            unit=self.unit,
        )

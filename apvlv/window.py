"""Tree of split windows, each leaf holding one document frame."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

__all__ = ["WindowType", "SplitError", "Window", "ctrl_value", "Frame"]

CTRL_MODIFIER = 0x04000000
PANE_SIZE = 100
RESIZE_STEP = 20


def ctrl_value(char: str) -> int:
    """Key code of *char* pressed together with Control."""
    return ord(char.upper()) | CTRL_MODIFIER


def _key_code(key) -> int:
    return ord(key) if isinstance(key, str) else int(key)


class Frame(Protocol):
    """What a window needs from the document frame it shows."""

    in_use: bool

    def clone(self) -> "Frame | None": ...

    def toggled_control_directory(self, forward: bool) -> bool: ...


class WindowType(Enum):
    """A FRAME window shows a document; SP and VSP only hold two sub-windows."""

    FRAME = "frame"
    SP = "sp"
    VSP = "vsp"


class SplitError(Exception):
    """Raised when a window cannot be split, closed or queried as asked."""


class Window:
    """A node in the window tree."""

    def __init__(self, frame: Frame | None = None) -> None:
        self.type = WindowType.FRAME
        self.parent: Window | None = None
        self.active: Window | None = None
        self.sizes = [PANE_SIZE, PANE_SIZE]
        self._frame: Frame | None = None
        self._children: list[Window] = []
        if frame is not None:
            self.set_frame(frame)

    def __repr__(self) -> str:
        return f"Window({self.type.name}, id={id(self):#x})"

    # frame handling

    def set_frame(self, frame: Frame) -> None:
        """Make this a FRAME window showing *frame*."""
        if self.type is WindowType.FRAME and self._frame is not None:
            self._frame.in_use = False
        self._children = []
        self._frame = frame
        frame.in_use = True
        self.type = WindowType.FRAME

    def steal_frame(self) -> Frame | None:
        """Detach and return the frame, leaving its in-use flag untouched."""
        self._require_frame()
        frame, self._frame = self._frame, None
        return frame

    def get_frame(self) -> Frame | None:
        self._require_frame()
        return self._frame

    def _require_frame(self) -> None:
        if self.type is not WindowType.FRAME:
            raise SplitError("window is a split, not a frame")

    def _release(self) -> None:
        if self.type is WindowType.FRAME and self._frame is not None:
            self._frame.in_use = False
            self._frame = None
        self.parent = None

    # tree navigation

    def first_window(self) -> Window:
        if self.type is WindowType.FRAME:
            raise SplitError("frame window has no sub-windows")
        return self._children[0]

    def second_window(self) -> Window:
        if self.type is WindowType.FRAME:
            raise SplitError("frame window has no sub-windows")
        return self._children[1]

    def parent_window(self) -> Window | None:
        return self.parent

    def root_window(self) -> Window:
        win = self
        while not win.is_root():
            win = win.parent
        return win

    def first_frame_window(self) -> Window:
        win = self
        while win.type is not WindowType.FRAME:
            win = win.first_window()
        return win

    def is_root(self) -> bool:
        return self.parent is None

    def set_as_root_active(self) -> None:
        self.root_window().active = self

    def find_window_by_frame(self, frame) -> Window | None:
        """The FRAME window in this subtree that shows *frame*."""
        stack = [self]
        while stack:
            win = stack.pop()
            if win.type is WindowType.FRAME:
                if win._frame is frame:
                    return win
            else:
                stack.extend(win._children)
        return None

    # splitting and closing

    def _split(self, window_type: WindowType, one: Window, other: Window) -> None:
        self._frame = None
        self._children = [one, other]
        one.parent = self
        other.parent = self
        self.sizes = [PANE_SIZE, PANE_SIZE]
        self.type = window_type

    def birth(self, window_type: WindowType, frame: Frame | None = None):
        """Split this FRAME window in two; return the (old, new) windows."""
        if self.type is not WindowType.FRAME:
            raise SplitError("only a frame window can be split")
        if window_type is WindowType.FRAME:
            raise SplitError("a split must be SP or VSP")
        current = self._frame
        if frame is None:
            frame = current.clone() if current is not None else None
            if frame is None:
                raise SplitError("can't split")
        self._frame = None
        win1 = Window()
        if current is not None:
            win1.set_frame(current)
        win2 = Window(frame)
        self._split(window_type, win1, win2)
        root = self.root_window()
        if root.active is self:
            root.active = win1
        return win1, win2

    def perish(self) -> None:
        """Close this FRAME window; its sibling takes the parent's place."""
        if self.type is not WindowType.FRAME:
            return
        par = self.parent
        if par is None:
            raise SplitError("cannot close the only window")
        root = self.root_window()
        if root.active is self:
            root.active = None

        win1, win2 = par._children
        rewin = win2 if self is win1 else win1
        grand = par.parent
        if grand is None:
            if rewin.type is WindowType.FRAME:
                kept = rewin.steal_frame()
                par._children = []
                par.type = WindowType.FRAME
                if kept is not None:
                    par.set_frame(kept)
            else:
                par._split(rewin.type, rewin.first_window(), rewin.second_window())
            rewin.parent = None
            self._release()
        else:
            slot = grand._children.index(par)
            grand._children[slot] = rewin
            rewin.parent = grand
            par.parent = None
            par._children = []
            self._release()

    # resizing

    def smaller(self, times: int = 1) -> None:
        if self.is_root():
            return
        pwin = self.parent
        delta = RESIZE_STEP * times
        first, second = pwin.sizes
        if pwin.first_window() is self:
            first, second = first - delta, second + delta
        else:
            first, second = first + delta, second - delta
        pwin.sizes = [max(0, first), max(0, second)]

    def bigger(self, times: int = 1) -> None:
        if self.is_root():
            return
        self.smaller(-times)

    # neighbours

    def _left(self) -> Window | None:
        if (
            self.type is WindowType.FRAME
            and self._frame is not None
            and self._frame.toggled_control_directory(False)
        ):
            return self
        fwin = self
        while fwin.parent is not None:
            fwin = fwin.parent
            if fwin.type is WindowType.SP and fwin.first_window() is not self:
                if fwin.second_window() is self:
                    return fwin.first_window()
                while fwin.type is not WindowType.FRAME:
                    fwin = fwin.second_window()
                return fwin
        return None

    def _right(self) -> Window | None:
        if (
            self.type is WindowType.FRAME
            and self._frame is not None
            and self._frame.toggled_control_directory(True)
        ):
            return self
        fwin = self
        while fwin.parent is not None:
            fwin = fwin.parent
            if fwin.type is WindowType.SP and fwin.second_window() is not self:
                if fwin.first_window() is self:
                    return fwin.second_window()
                while fwin.type is not WindowType.FRAME:
                    fwin = fwin.first_window()
                return fwin
        return None

    def _top(self) -> Window | None:
        fwin = self
        while fwin.parent is not None:
            fwin = fwin.parent
            if fwin.type is WindowType.VSP and fwin.first_window() is not self:
                if fwin.second_window() is self:
                    return fwin.first_window()
                while fwin.type is not WindowType.FRAME:
                    fwin = fwin.second_window()
                return fwin
        return None

    def _bottom(self) -> Window | None:
        fwin = self
        while fwin.parent is not None:
            fwin = fwin.parent
            if fwin.type is WindowType.VSP and fwin.second_window() is not self:
                if fwin.first_window() is self:
                    return fwin.second_window()
                while fwin.type is not WindowType.FRAME:
                    fwin = fwin.first_window()
                return fwin
        return None

    def get_next(self) -> Window | None:
        return self._right() or self._bottom() or self._left() or self._top()

    def get_neighbor(self, count: int, key) -> Window | None:
        """The window *count* steps away in the direction given by *key*."""
        moves = {
            ctrl_value("w"): Window.get_next,
            ord("i"): Window._top,
            ord("k"): Window._bottom,
            ord("j"): Window._left,
            ord("l"): Window._right,
        }
        move = moves.get(_key_code(key))
        last = None
        win = self
        for _ in range(count):
            if move is not None:
                win = move(win)
            if win is None:
                break
            last = win
        return last

    def process(self, times: int, key) -> Window | None:
        """Handle a window command key; return the window made active, if any."""
        code = _key_code(key)
        if code in (ctrl_value("w"), ord("k"), ord("j"), ord("i"), ord("l")):
            nwin = self.get_neighbor(times, code)
            if nwin is not None and nwin is not self:
                nwin.set_as_root_active()
                return nwin
        elif code == ord("-"):
            self.smaller(times)
        elif code == ord("+"):
            self.bigger(times)
        return None
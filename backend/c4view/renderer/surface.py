from typing import Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable

ResizeCallback = Callable[[float, float], None]


@runtime_checkable
class DrawingSurface(Protocol):
    """The area a render engine draws into. Size is (width, height)."""

    def size(self) -> Tuple[float, float]:
        ...


@runtime_checkable
class ResizeObservable(Protocol):
    def on_resize(self, callback: ResizeCallback) -> Callable[[], None]:
        """Subscribe to size changes; returns an unsubscribe function."""
        ...


def has_area(surface: DrawingSurface) -> bool:
    width, height = surface.size()
    return width > 0 and height > 0


class StaticSurface:
    """In-process surface whose size is set explicitly (tests, headless hosts)."""

    def __init__(self, width: float = 0, height: float = 0):
        self._width = width
        self._height = height
        self._listeners: List[ResizeCallback] = []

    def size(self) -> Tuple[float, float]:
        return self._width, self._height

    def resize(self, width: float, height: float):
        self._width = width
        self._height = height
        for callback in list(self._listeners):
            callback(width, height)

    def on_resize(self, callback: ResizeCallback) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class SurfaceRegistry:
    """Named mount points a viewer can be attached to."""

    def __init__(self):
        self._surfaces: Dict[str, DrawingSurface] = {}

    def register(self, name: str, surface: DrawingSurface) -> DrawingSurface:
        self._surfaces[name] = surface
        return surface

    def unregister(self, name: str):
        self._surfaces.pop(name, None)

    def get(self, name: str) -> Optional[DrawingSurface]:
        return self._surfaces.get(name)

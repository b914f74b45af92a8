"""Text scene description reader.

A scene file holds one command per line; ``#`` starts a comment. The current
material and transform are state that applies to every shape that follows
until changed. Each file starts from a black material and the identity
transform.

Commands:
    cam ex ey ez  llx lly llz  lrx lry lrz  ulx uly ulz  urx ury urz
        Camera eye and view-plane corners (lower-left, lower-right,
        upper-left, upper-right).
    sph cx cy cz r                 Sphere.
    tri ax ay az bx by bz cx cy cz Triangle.
    obj path                       OBJ mesh, relative to the scene file.
    ltp px py pz r g b [falloff]   Point light; falloff 0 none, 1 linear,
                                   2 quadratic.
    ltd dx dy dz r g b             Directional light (travel direction).
    lta r g b                      Ambient light.
    mat ka(3) kd(3) ks(3) p kr(3)  Set the current material.
    xft tx ty tz                   Append a translation.
    xfr rx ry rz                   Append a rotation (exponential map, deg).
    xfs sx sy sz                   Append a scale.
    xfz                            Reset the transform to identity.

Unknown commands and surplus parameters are logged as warnings and ignored.
Missing or non-numeric parameters raise SceneParseError.

Example:
    >>> from whitted.io.scene_file import load_scene
    >>> scene = load_scene(["examples/scenes/spheres.txt"])
    >>> tree = scene.build()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from whitted.core.integrator import TraceSettings
from whitted.core.transform import Transform
from whitted.geometry.sphere import Sphere
from whitted.geometry.triangle import Triangle
from whitted.io.obj import ObjParseError
from whitted.materials.phong import PhongMaterial
from whitted.scene.light import AmbientLight, DirectionalLight, point_light
from whitted.scene.manager import Scene

logger = logging.getLogger(__name__)


class SceneParseError(ValueError):
    """Raised for a malformed line in a scene file.

    Attributes:
        source: Name of the file (or ``<string>``) being read.
        lineno: 1-based line number of the offending line.
    """

    def __init__(self, source: str, lineno: int, message: str) -> None:
        super().__init__(f"{source}:{lineno}: {message}")
        self.source = source
        self.lineno = lineno


class SceneReader:
    """Applies scene-file commands to a Scene.

    Holds the sticky material and transform for one file.
    """

    # command -> (required parameter count, optional parameter count)
    ARITY: dict[str, tuple[int, int]] = {
        "cam": (15, 0),
        "sph": (4, 0),
        "tri": (9, 0),
        "ltp": (6, 1),
        "ltd": (6, 0),
        "lta": (3, 0),
        "mat": (13, 0),
        "xft": (3, 0),
        "xfr": (3, 0),
        "xfs": (3, 0),
        "xfz": (0, 0),
    }

    def __init__(self, scene: Scene, base_dir: Path | None = None, source: str = "<string>") -> None:
        self.scene = scene
        self.base_dir = base_dir if base_dir is not None else Path.cwd()
        self.source = source
        self.material = PhongMaterial()
        self.transform = Transform()
        self._handlers: dict[str, Callable[[list[float]], None]] = {
            "cam": self._camera,
            "sph": self._sphere,
            "tri": self._triangle,
            "ltp": self._point_light,
            "ltd": self._directional_light,
            "lta": self._ambient_light,
            "mat": self._material,
            "xft": lambda a: self.transform.append_translation(*a),
            "xfr": lambda a: self.transform.append_rotation(*a),
            "xfs": lambda a: self.transform.append_scale(*a),
            "xfz": lambda a: self.transform.reset(),
        }

    def read_lines(self, lines: Iterable[str]) -> None:
        for lineno, line in enumerate(lines, start=1):
            self.read_line(line, lineno)

    def read_line(self, line: str, lineno: int) -> None:
        """Parse and apply a single line."""
        tokens = line.split("#", 1)[0].split()
        if not tokens:
            return
        command, args = tokens[0], tokens[1:]

        if command == "obj":
            if not args:
                raise SceneParseError(self.source, lineno, "obj requires a file name")
            self._warn_extra(args[1:], lineno, line)
            self._obj(args[0], lineno)
            return

        if command not in self._handlers:
            logger.warning("%s:%d: unsupported feature: %s", self.source, lineno, line.strip())
            return

        required, optional = self.ARITY[command]
        if len(args) < required:
            raise SceneParseError(
                self.source, lineno, f"{command} expects {required} values, got {len(args)}"
            )
        used = args[: required + optional]
        self._warn_extra(args[required + optional :], lineno, line)
        try:
            values = [float(a) for a in used]
        except ValueError:
            raise SceneParseError(self.source, lineno, f"invalid number in {line.strip()!r}") from None
        try:
            self._handlers[command](values)
        except SceneParseError:
            raise
        except ValueError as exc:
            raise SceneParseError(self.source, lineno, str(exc)) from exc

    def _warn_extra(self, extra: list[str], lineno: int, line: str) -> None:
        if extra:
            logger.warning("%s:%d: ignoring extra params on line: %s", self.source, lineno, line.strip())

    # =========================================================================
    # Command Handlers
    # =========================================================================

    def _camera(self, a: list[float]) -> None:
        eye, ll, lr, ul, ur = a[0:3], a[3:6], a[6:9], a[9:12], a[12:15]
        self.scene.set_camera(eye, ul, ur, ll, lr)

    def _sphere(self, a: list[float]) -> None:
        self.scene.add_element(Sphere(a[0:3], a[3]), self.transform, self.material)

    def _triangle(self, a: list[float]) -> None:
        self.scene.add_element(Triangle(a[0:3], a[3:6], a[6:9]), self.transform, self.material)

    def _obj(self, name: str, lineno: int) -> None:
        path = Path(name)
        if not path.is_absolute():
            path = self.base_dir / path
        try:
            self.scene.add_obj(path, self.transform, self.material)
        except (OSError, ObjParseError) as exc:
            raise SceneParseError(self.source, lineno, f"cannot read file {name}: {exc}") from exc

    def _point_light(self, a: list[float]) -> None:
        falloff = int(a[6]) if len(a) > 6 else 0
        self.scene.add_light(point_light(a[0:3], a[3:6], falloff))

    def _directional_light(self, a: list[float]) -> None:
        self.scene.add_light(DirectionalLight(a[0:3], a[3:6]))

    def _ambient_light(self, a: list[float]) -> None:
        self.scene.add_light(AmbientLight(a[0:3]))

    def _material(self, a: list[float]) -> None:
        self.material = PhongMaterial.from_values(a)


def parse_scene_text(text: str, scene: Scene, base_dir: Path | None = None, source: str = "<string>") -> Scene:
    """Apply the commands in ``text`` to ``scene``.

    Args:
        text: Scene file contents.
        scene: Scene to add to.
        base_dir: Directory that relative ``obj`` paths resolve against.
        source: Name used in warnings and errors.

    Returns:
        The same scene, for chaining.
    """
    SceneReader(scene, base_dir, source).read_lines(text.splitlines())
    return scene


def parse_scene_file(path: str | Path, scene: Scene) -> Scene:
    """Read one scene file into ``scene``."""
    path = Path(path)
    logger.info("Reading scene file %s", path)
    return parse_scene_text(path.read_text(), scene, path.parent, str(path))


def load_scene(paths: Iterable[str | Path], settings: TraceSettings | None = None) -> Scene:
    """Create a scene from one or more scene files, read in order.

    The returned scene is not built yet; call ``build()`` before tracing.
    """
    scene = Scene(settings)
    for path in paths:
        parse_scene_file(path, scene)
    return scene

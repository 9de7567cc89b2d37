"""
Model the simulation is performed on.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from .constants import DEFAULT_CONSTANTS, SimulationConstants
from .geometry import MeshGeometry, Triangle, prepare_mesh_geometry
from .mesh_utils import load_mesh
from .vectors import Vec3


class Model:
    """Collection of triangles describing the sample under test.

    Attributes
    ----------
    triangles : tuple of Triangle
        Model triangles, index-aligned with ``geometry``.
    geometry : MeshGeometry
        Packed triangle arrays used for vectorised ray tests.
    height : float
        Highest vertex z coordinate (0 for an empty model).
    side_size : float
        Half-width of the model footprint, the largest absolute x or y
        vertex coordinate.
    """

    def __init__(self, triangles: Sequence[Triangle] = ()):
        self.triangles: Tuple[Triangle, ...] = tuple(triangles)
        self.geometry: MeshGeometry = prepare_mesh_geometry(self.triangles)

        if self.triangles:
            vertices = np.concatenate([self.geometry.point1, self.geometry.point2, self.geometry.point3])
            self.height = float(np.max(vertices[:, 2]))
            self.side_size = float(np.max(np.abs(vertices[:, :2])))
        else:
            self.height = 0.0
            self.side_size = 0.0

    @property
    def is_empty(self) -> bool:
        return len(self.triangles) == 0

    def __len__(self) -> int:
        return len(self.triangles)

    @classmethod
    def from_mesh_array(cls, mesh: np.ndarray, constants: SimulationConstants = DEFAULT_CONSTANTS) -> "Model":
        """Build a model from an array of shape ``(n, 3, 3)``.

        Raises ``ValueError`` if any facet is degenerate.
        """
        mesh = np.asarray(mesh, dtype=float)
        if mesh.ndim != 3 or mesh.shape[1:] != (3, 3):
            raise ValueError(f"Expected mesh of shape (n, 3, 3), got {mesh.shape}")
        triangles = []
        for index, facet in enumerate(mesh):
            try:
                triangles.append(Triangle(*(Vec3.from_array(vertex) for vertex in facet), constants=constants))
            except ValueError as e:
                raise ValueError(f"Invalid facet {index} in mesh: {e}") from e
        return cls(triangles)

    @classmethod
    def load_from_file(
        cls,
        file_path: str,
        scale: float = 1.0,
        constants: SimulationConstants = DEFAULT_CONSTANTS,
    ) -> "Model":
        """Load a model from an STL or OBJ file, scaling coordinates by ``scale``."""
        return cls.from_mesh_array(load_mesh(str(file_path)) * scale, constants)

    @classmethod
    def new_reference_model(cls, side_size: float, constants: SimulationConstants = DEFAULT_CONSTANTS) -> "Model":
        """Flat square plate ``[-side_size, side_size]^2`` lying on z = 0.

        The reference measurement of ISO 17497-2 is made against such a
        plain reflector.
        """
        if side_size <= 0:
            raise ValueError(f"Reference model side size must be positive, got {side_size}")
        s = float(side_size)
        corners = [Vec3(-s, -s, 0.0), Vec3(s, -s, 0.0), Vec3(s, s, 0.0), Vec3(-s, s, 0.0)]
        return cls([
            Triangle(corners[0], corners[1], corners[2], constants),
            Triangle(corners[0], corners[2], corners[3], constants),
        ])

    def describe(self) -> str:
        return (
            f"Model: {len(self.triangles)} triangles, height: {self.height:g} [m], "
            f"side size: {self.side_size:g} [m]"
        )

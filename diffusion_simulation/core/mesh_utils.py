"""
Mesh file loading (STL and Wavefront OBJ).

Both loaders return an array of shape ``(n_facets, 3, 3)`` holding the three
vertices of every triangle.
"""

from __future__ import annotations

import os
from typing import List, Optional

import numpy as np

STL_HEADER_SIZE = 80

# normal (3 x float32), three vertices (9 x float32), attribute byte count
STL_RECORD_DTYPE = np.dtype([
    ('normal', '<f4', (3,)),
    ('vertices', '<f4', (3, 3)),
    ('attributes', '<u2'),
])


def _binary_stl_facet_count(file_path: str) -> Optional[int]:
    """Facet count of a binary STL, or None when the file size does not match one."""
    file_size = os.path.getsize(file_path)
    if file_size < STL_HEADER_SIZE + 4:
        return None
    with open(file_path, 'rb') as f:
        f.seek(STL_HEADER_SIZE)
        count = int(np.frombuffer(f.read(4), dtype='<u4')[0])
    if count == 0 or STL_HEADER_SIZE + 4 + count * STL_RECORD_DTYPE.itemsize != file_size:
        return None
    return count


def _read_binary_stl(file_path: str, count: int) -> np.ndarray:
    records = np.fromfile(file_path, dtype=STL_RECORD_DTYPE, count=count, offset=STL_HEADER_SIZE + 4)
    return records['vertices'].astype(float)


def _read_ascii_stl(file_path: str) -> Optional[np.ndarray]:
    facets: List[List[List[float]]] = []
    vertices: List[List[float]] = []
    with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
        for line in f:
            tokens = line.split()
            if not tokens:
                continue
            keyword = tokens[0].lower()
            if keyword == 'vertex' and len(tokens) >= 4:
                vertices.append([float(value) for value in tokens[1:4]])
            elif keyword == 'endfacet':
                if len(vertices) >= 3:
                    facets.append(vertices[:3])
                vertices = []
            elif keyword == 'facet':
                vertices = []
    if not facets:
        return None
    return np.array(facets, dtype=float)


def load_stl_mesh(file_path: str) -> np.ndarray:
    """Load the triangles of an STL file.

    Binary files are recognised by their size matching the facet count in
    the header; anything else is read as ASCII. Facet normals stored in the
    file are ignored, normals are recomputed from the vertex order.

    Parameters
    ----------
    file_path : str
        Path to the STL file on disk.

    Returns
    -------
    np.ndarray, shape (n_facets, 3, 3)
        Vertices ``[v0, v1, v2]`` of every facet.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"STL file '{file_path}' does not exist")

    count = _binary_stl_facet_count(file_path)
    facets = _read_binary_stl(file_path, count) if count is not None else _read_ascii_stl(file_path)

    if facets is None:
        raise ValueError(f"No facets were found in '{file_path}' - the file may be corrupt")
    return facets


def load_obj_mesh(file_path: str) -> np.ndarray:
    """Load the faces of a Wavefront OBJ file.

    Only ``v`` and ``f`` records are read. Polygons with more than three
    vertices are split into a triangle fan; negative (relative) indices are
    supported.

    Returns
    -------
    np.ndarray, shape (n_facets, 3, 3)
        Vertices ``[v0, v1, v2]`` of every triangle.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"OBJ file '{file_path}' does not exist")

    vertices: List[List[float]] = []
    facets: List[np.ndarray] = []
    with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
        for line_number, line in enumerate(f, start=1):
            tokens = line.split('#', 1)[0].split()
            if not tokens:
                continue
            if tokens[0] == 'v':
                if len(tokens) < 4:
                    raise ValueError(f"Invalid vertex at line {line_number} of '{file_path}'")
                vertices.append([float(value) for value in tokens[1:4]])
            elif tokens[0] == 'f':
                indices = []
                for token in tokens[1:]:
                    index = int(token.split('/')[0])
                    indices.append(index - 1 if index > 0 else len(vertices) + index)
                if len(indices) < 3:
                    raise ValueError(f"Face with less than 3 vertices at line {line_number} of '{file_path}'")
                for i in range(1, len(indices) - 1):
                    triangle = [indices[0], indices[i], indices[i + 1]]
                    if any(index < 0 or index >= len(vertices) for index in triangle):
                        raise ValueError(f"Face references an unknown vertex at line {line_number} of '{file_path}'")
                    facets.append(np.array([vertices[index] for index in triangle], dtype=float))

    if not facets:
        raise ValueError(f"No faces were found in '{file_path}'")
    return np.stack(facets, axis=0)


def load_mesh(file_path: str) -> np.ndarray:
    """Load an STL or OBJ mesh, chosen by file extension."""
    extension = os.path.splitext(file_path)[1].lower()
    if extension == '.stl':
        return load_stl_mesh(file_path)
    if extension == '.obj':
        return load_obj_mesh(file_path)
    raise ValueError(f"Unsupported mesh format '{extension}', expected .stl or .obj")

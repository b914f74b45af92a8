"""Whitted-style recursive ray tracer with BVH acceleration.

This package renders scenes of spheres, triangles and boxes with Phong
shading, hard shadows and mirror reflections, using a bounding volume
hierarchy to accelerate ray queries.

Subpackages:
    core: Rays, affine transforms, the tracing integrator and the
        progressive image renderer
    geometry: Shape primitives, bounding boxes and the BVH
    materials: Phong material model
    scene: Lights, scene elements and the scene container
    camera: View-plane camera and jittered pixel sampler
    io: Scene description and OBJ mesh readers
    preview: Image export
"""

__version__ = "0.1.0"

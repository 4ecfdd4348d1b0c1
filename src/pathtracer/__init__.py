"""Monte Carlo path tracer built on Taichi.

Scenes of spheres and planes with simple diffuse/specular materials, lit by
emissive shapes, are rendered by averaging many randomly scattered light paths
per pixel.

Subpackages:
    core: Value types, device ray utilities, pixel buffers and the renderer
    geometry: Shape primitives and intersection
    materials: Material interface and the simple scattering model
    camera: Pinhole camera and view plane
    scene: Scene aggregate, device scene storage and the box demo scene
    preview: Tone mapping, PNG export and Matplotlib preview
"""

__version__ = "0.1.0"

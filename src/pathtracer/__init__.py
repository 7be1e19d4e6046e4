"""Monte Carlo path tracer built on Taichi.

This package renders scenes of spheres with diffuse, metal and dielectric
materials by stochastically sampling light paths, with support for:
- Thin-lens camera with depth of field
- Bounded-depth iterative path tracing
- Deterministic per-pixel random streams
- Parallel per-pixel sampling with progress counters

Subpackages:
    core: Vectors, rays, sampling, integrator and render driver
    geometry: Sphere primitive and hit records
    materials: Diffuse, metal and dielectric scattering models
    scene: Scene storage, material table and scene generators
    camera: Thin-lens camera model with ray generation
    preview: Image export (PPM, PNG)

Taichi must be initialized with ``ti.init`` before importing modules that
declare fields (scene, materials, camera, integrator).
"""

__version__ = "0.1.0"

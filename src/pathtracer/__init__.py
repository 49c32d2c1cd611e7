"""Taichi implementation of a Monte Carlo sphere path tracer.

This package renders scenes of spheres by recursively scattering rays off
diffuse, metallic and glass surfaces and averaging many random samples per
pixel. All per-ray math runs inside Taichi functions.

Subpackages:
    core: Vector algebra, rays, intervals, color quantisation, the integrator
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering
    scene: Primitive storage, nearest-hit queries and the scene manager
    camera: Camera configuration and primary ray generation
    preview: PPM/PNG export of the rendered pixel stream

Taichi must be initialised (see ``pathtracer.core.runtime.init_taichi``)
before importing modules that declare fields.
"""

__version__ = "0.1.0"

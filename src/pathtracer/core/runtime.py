"""Taichi runtime initialisation.

Every random draw in the renderer comes from Taichi's per-thread generator,
which is seeded here. Because render kernels are serialised, two renders of
the same scene with the same seed produce identical images.

Example:
    >>> import taichi as ti
    >>> from pathtracer.core.runtime import init_taichi
    >>> init_taichi(arch=ti.cpu, seed=1234)
"""

import logging

import taichi as ti

logger = logging.getLogger(__name__)

DEFAULT_SEED = 0


def init_taichi(arch=None, seed: int = DEFAULT_SEED, debug: bool = False) -> None:
    """Initialise Taichi in double precision with an explicit random seed.

    Calling this again resets the Taichi runtime, which discards every field
    (scene, materials, camera, render target). Rebuild the scene afterwards.

    Args:
        arch: Taichi backend. Defaults to ``ti.cpu``.
        seed: Seed for ``ti.random``.
        debug: Enable Taichi's debug mode (bounds checks).
    """
    if arch is None:
        arch = ti.cpu
    ti.init(arch=arch, default_fp=ti.f64, random_seed=seed, debug=debug)
    logger.debug(f"Taichi initialised: arch={arch} seed={seed} debug={debug}")

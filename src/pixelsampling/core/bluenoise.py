"""Blue-noise textures for decorrelating samples across pixels.

The textures are toroidal rank maps built with the void-and-cluster
"void filling" phase: cells are ranked one at a time, always picking the
unranked cell with the lowest energy, where every ranked cell radiates a
Gaussian energy splat. Ranking the emptiest region first spreads
consecutive ranks apart, so any threshold of the texture is a blue-noise
point set and neighbouring pixels receive well separated values.

The build runs once per process in a Taichi kernel (textures in parallel,
ranks within a texture in order) and the result is cached as a read-only
numpy array.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pixelsampling.core.bluenoise import blue_noise
    >>> u = blue_noise(3, (17, 42))  # value in [0, 1)
"""

import functools

import numpy as np
import numpy.typing as npt
import taichi as ti

# Side length of each square texture, in pixels
BLUE_NOISE_RESOLUTION = 64

# Number of independent textures (indexed modulo this count)
BLUE_NOISE_TEXTURE_COUNT = 16

# Standard deviation of the energy splat, in pixels
BLUE_NOISE_SIGMA = 1.5

# Splat half-width; exp(-r^2 / 2 sigma^2) is negligible past this radius
_SPLAT_RADIUS = 6

# Fixed seed for the tiebreak jitter so textures are identical across runs
_TIEBREAK_SEED = 0x5EED

# =============================================================================
# Taichi Kernel
# =============================================================================


@ti.kernel
def _fill_voids(
    energy: ti.template(),
    ranks: ti.template(),
    tiebreak: ti.template(),
    texture_count: ti.i32,
    resolution: ti.i32,
    sigma: ti.f32,
):
    # Only the outermost loop is parallel; each texture is ranked serially
    for t in range(texture_count):
        n_cells = resolution * resolution
        inv_two_sigma_sq = 1.0 / (2.0 * sigma * sigma)
        for r in range(n_cells):
            best = 0
            best_energy = 1e30
            for c in range(n_cells):
                if ranks[t, c] < 0:
                    e = energy[t, c] + tiebreak[t, c]
                    if e < best_energy:
                        best_energy = e
                        best = c
            ranks[t, best] = r

            bx = best % resolution
            by = best // resolution
            for dy in range(-_SPLAT_RADIUS, _SPLAT_RADIUS + 1):
                for dx in range(-_SPLAT_RADIUS, _SPLAT_RADIUS + 1):
                    x = (bx + dx + resolution) % resolution
                    y = (by + dy + resolution) % resolution
                    energy[t, y * resolution + x] += ti.exp(-(dx * dx + dy * dy) * inv_two_sigma_sq)


# =============================================================================
# Texture Access
# =============================================================================


@functools.lru_cache(maxsize=None)
def blue_noise_textures() -> npt.NDArray[np.float32]:
    """Build (once) and return the blue-noise textures.

    Taichi must be initialised before the first call.

    Returns:
        Read-only array of shape (BLUE_NOISE_TEXTURE_COUNT,
        BLUE_NOISE_RESOLUTION, BLUE_NOISE_RESOLUTION) indexed [t, y, x],
        where each texture holds every value k / RESOLUTION^2 exactly once.
    """
    n_cells = BLUE_NOISE_RESOLUTION * BLUE_NOISE_RESOLUTION
    shape = (BLUE_NOISE_TEXTURE_COUNT, n_cells)

    energy = ti.field(dtype=ti.f32, shape=shape)
    ranks = ti.field(dtype=ti.i32, shape=shape)
    tiebreak = ti.field(dtype=ti.f32, shape=shape)

    rng = np.random.default_rng(_TIEBREAK_SEED)
    tiebreak.from_numpy((rng.random(shape) * 1e-3).astype(np.float32))
    energy.fill(0.0)
    ranks.fill(-1)

    _fill_voids(
        energy,
        ranks,
        tiebreak,
        BLUE_NOISE_TEXTURE_COUNT,
        BLUE_NOISE_RESOLUTION,
        BLUE_NOISE_SIGMA,
    )

    values = ranks.to_numpy().astype(np.float32) / np.float32(n_cells)
    values = values.reshape(BLUE_NOISE_TEXTURE_COUNT, BLUE_NOISE_RESOLUTION, BLUE_NOISE_RESOLUTION)
    values.flags.writeable = False
    return values


def blue_noise(texture_index: int, pixel: tuple[int, int]) -> float:
    """Look up a blue-noise value for a pixel.

    Both the texture index and the pixel coordinates wrap, so any integers
    are valid.

    Args:
        texture_index: Selects the texture (usually a sample dimension).
        pixel: Pixel coordinates (x, y).

    Returns:
        A value in [0, 1).
    """
    textures = blue_noise_textures()
    return float(
        textures[
            texture_index % BLUE_NOISE_TEXTURE_COUNT,
            pixel[1] % BLUE_NOISE_RESOLUTION,
            pixel[0] % BLUE_NOISE_RESOLUTION,
        ]
    )

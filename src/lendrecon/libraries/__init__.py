from . import token_math, wad_ray_math

__all__ = (
    "token_math",
    "wad_ray_math",
)

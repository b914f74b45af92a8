"""Camera models and pixel sampling.

Components:
    view_plane: Eye plus four view-plane corners, bilinear ray generation
    sampler: Stratified jittered sub-pixel sampling
"""

from .sampler import JitterSampler
from .view_plane import ViewPlaneCamera

__all__ = [
    "ViewPlaneCamera",
    "JitterSampler",
]

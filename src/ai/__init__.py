"""
Gemini grading backends and graders.

Usage:
    from ai import create_grader

    grader = create_grader()
    response = await grader.grade(request)
    multipass = await grader.grade_multipass(request, num_runs=5, concurrency=3)
"""

# Lazy imports so importing the package does not pull in google-genai
__all__ = [
    "BackendPool",
    "GeminiBackend",
    "SinglePassGrader",
    "MultipassGrader",
    "ImageValidator",
    "create_backend_pool",
    "create_byok_backend",
    "create_grader",
]


def BackendPool(*args, **kwargs):
    """Create a backend pool (lazy import)."""
    from .pool import BackendPool as _BackendPool
    return _BackendPool(*args, **kwargs)


def GeminiBackend(*args, **kwargs):
    """Create a Gemini backend handle (lazy import)."""
    from .backend import GeminiBackend as _GeminiBackend
    return _GeminiBackend(*args, **kwargs)


def SinglePassGrader(*args, **kwargs):
    """Create a single-pass grader (lazy import)."""
    from .single_pass_grader import SinglePassGrader as _SinglePassGrader
    return _SinglePassGrader(*args, **kwargs)


def MultipassGrader(*args, **kwargs):
    """Create a multipass grader (lazy import)."""
    from .multipass_grader import MultipassGrader as _MultipassGrader
    return _MultipassGrader(*args, **kwargs)


def ImageValidator(*args, **kwargs):
    """Create an image validator (lazy import)."""
    from .image_validator import ImageValidator as _ImageValidator
    return _ImageValidator(*args, **kwargs)


def create_backend_pool(*args, **kwargs):
    """Build a backend pool from settings (lazy import)."""
    from .provider_factory import create_backend_pool as _create_backend_pool
    return _create_backend_pool(*args, **kwargs)


def create_byok_backend(*args, **kwargs):
    """Build a backend for a caller-supplied key (lazy import)."""
    from .provider_factory import create_byok_backend as _create_byok_backend
    return _create_byok_backend(*args, **kwargs)


def create_grader(*args, **kwargs):
    """Create a grader from settings (lazy import)."""
    from .provider_factory import create_grader as _create_grader
    return _create_grader(*args, **kwargs)

"""
Angle inference: opaque model backends, the position-to-angles adapter,
and asynchronous one-shot model loading.
"""

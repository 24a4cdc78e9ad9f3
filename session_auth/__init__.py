"""
Session Auth Service
--------------------
Stateless JWT access/refresh token pairs backed by a revocable Redis allowlist.
"""

__version__ = "1.0.0"

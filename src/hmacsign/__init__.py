"""
hmacsign: HMAC-SHA256 request signatures for outbound API calls.

Builds the canonical ``key:timestamp[:bodyDigest]`` string for a request,
signs it with a shared secret and returns the base64 encoded signature.
"""

__version__ = "1.0.0"

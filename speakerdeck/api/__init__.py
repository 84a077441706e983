"""HTTP API exposing the scrapers as JSON endpoints.

Requires the ``api`` extra::

    pip install speakerdeck-api[api]
"""

try:
    import fastapi  # noqa: F401
    import uvicorn  # noqa: F401
except ImportError:
    raise ImportError(
        "API features require the 'api' extra. "
        "Install with: pip install speakerdeck-api[api]"
    )

"""FastAPI application and routes.

This module provides the REST API for the climbing conditions service.

## API Structure

- /health - Liveness check
- /api/conditions - Current conditions and annotated forecast for a crag
- /api/conditions/windows - Best climbing windows for a crag

No endpoint requires authentication; responses are cached in-process.
"""

from crag_conditions.api.app import create_app

__all__ = ["create_app"]

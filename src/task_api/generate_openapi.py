"""
Utility script to generate and write the OpenAPI schema for the task service.

The schema is the machine-readable form of the request/response contract
shared by the server and its clients, so client tooling can consume it without
running the server.

Usage:
    python -m task_api.generate_openapi [output_path]

Notes:
- The script ensures the 'tasks' tag is present in the OpenAPI tags metadata.
- The default output path is interfaces/openapi.json under the current directory.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .main import app, openapi_tags

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema contains the expected tags metadata. Existing
    tag definitions are kept; missing ones are appended.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema to `out_path` (creating directories) and return the path."""
    path = out_path or DEFAULT_OUTPUT
    schema = app.openapi()
    _ensure_tags(schema)

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to: %s", path)
    return path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    generate_openapi(args[0] if args else None)


if __name__ == "__main__":
    main()

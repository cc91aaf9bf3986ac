"""Print the actions synthesized from a local OpenAPI/Swagger document."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict

from openapi_actions.config import Settings
from openapi_actions.errors import InitializationError
from openapi_actions.service import Service


def _load_document(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def main() -> None:
    parser = argparse.ArgumentParser(description="List action names synthesized from a document")
    parser.add_argument(
        "--document",
        default=os.getenv("OPENAPI_DOCUMENT_PATH", ""),
        help="Path to swagger.json",
    )
    parser.add_argument(
        "--namespace",
        default=os.getenv("API_URL_NAMESPACE", "rest"),
        help="Path segment left out of action names",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Also print verb and path of every action",
    )

    args = parser.parse_args()
    if not args.document:
        raise SystemExit("Document path missing. Set --document or OPENAPI_DOCUMENT_PATH.")

    document_path = Path(args.document).expanduser().resolve()
    if not document_path.exists():
        raise SystemExit(f"Document not found: {document_path}")

    service = Service(Settings(api_url_namespace=args.namespace))
    document = _load_document(document_path)
    result = service.initialize_from_document(document)
    if isinstance(result, InitializationError):
        raise SystemExit(str(result))

    for name, action in sorted(service.actions.items()):
        if args.verbose:
            print(f"{name}\t{action.descriptor.verb.upper()}\t{action.descriptor.path}")
        else:
            print(name)

    declared = len(document.get("paths") or {})
    print(f"{service.title} {service.api_version}: {len(service.endpoints)}/{declared} paths, {len(service.actions)} actions")


if __name__ == "__main__":
    main()

"""Export JSON schemas for the persisted Decision blob and the LLM output contracts."""

import json
import sys
from pathlib import Path

from pydantic import BaseModel

from backend.app.models import AIAnalysis, Decision, ExtractionResult

SCHEMAS: dict[str, type[BaseModel]] = {
    "Decision": Decision,
    "AIAnalysis": AIAnalysis,
    "ExtractionResult": ExtractionResult,
}


def export_schemas(schemas_dir: Path) -> list[Path]:
    """Write one <Name>.schema.json per contract (by-alias, as stored and sent)."""
    schemas_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, model in SCHEMAS.items():
        path = schemas_dir / f"{name}.schema.json"
        with open(path, "w") as f:
            json.dump(model.model_json_schema(by_alias=True), f, indent=2)
        written.append(path)
    return written


def main() -> None:
    """Export schemas to docs/schemas/ (or the directory given as first argument)."""
    schemas_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("docs/schemas")
    for path in export_schemas(schemas_dir):
        print(f"Exported {path.stem.removesuffix('.schema')} schema to {path}")


if __name__ == "__main__":
    main()

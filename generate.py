# permmap - regenerate the permission artifacts from the schema file
import logging
from pathlib import Path

from config import Settings, get_settings
from permmap import build_mapping_table, load_schema_document, write_artifacts
from permmap.resources import Taxonomy

log = logging.getLogger(__name__)


def generate(settings: Settings | None = None) -> list[Path]:
    """Load the schema, validate every decision and write both artifacts.

    SchemaError and ValidationError propagate so a failed generation fails the build.
    """
    settings = settings or get_settings()
    document = load_schema_document(settings.schema_path)
    table = build_mapping_table(Taxonomy.from_document(document), document.decisions)
    return write_artifacts(
        table,
        settings.output_dir,
        typescript_name=settings.typescript_filename,
        json_name=settings.json_filename,
    )


if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    for path in generate(settings):
        print(f"Generated {path}")

"""JSON file sink for exporting dashboard reports."""

import json
import logging
from pathlib import Path
from typing import Any

from crm_insights.exceptions import ExportError
from crm_insights.sinks.serialization import serialize_value

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Output reports to JSON files."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.pretty = pretty
        self._written: list[Path] = []

    def write_report(self, name: str, payload: Any) -> Path:
        """Write one payload to ``<output_dir>/<name>.json``.

        Raises
        ------
        ExportError
            If the directory or file cannot be written.
        """
        file_path = self.output_dir / f"{name}.json"
        data = serialize_value(payload)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as exc:
            raise ExportError(f"Cannot write {file_path}: {exc}") from exc

        self._written.append(file_path)
        logger.info("Wrote %s", file_path)
        return file_path

    @property
    def written(self) -> list[Path]:
        return list(self._written)

"""
Snapshot Provider
-----------------

Captures the current screen's element tree as text for the healing
prompt.  The page source is parsed, a structural path is computed for
every element (tag names from the root, with ``[@resource-id='…']``
wherever the element has one), and the XML is returned with a leading
comment listing the path count and the first few paths.

Each capture is also written to disk as ``snapshot_<timestamp>.xml``
plus ``xpaths_<timestamp>.txt`` for post-mortem debugging.  These files
are never read back by the engine; only the returned string is used.
"""

from __future__ import annotations

import datetime as _dt
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional

from .utils.logger import get_logger

SAMPLE_PATHS = 10
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"


def element_paths(root: ET.Element) -> List[str]:
    """Return a structural path for every element under (and including) ``root``."""
    parents: Dict[ET.Element, ET.Element] = {child: parent for parent in root.iter() for child in parent}
    paths: List[str] = []
    for element in root.iter():
        levels: List[str] = []
        current: Optional[ET.Element] = element
        while current is not None:
            resource_id = current.get("resource-id")
            levels.append(f"{current.tag}[@resource-id='{resource_id}']" if resource_id else current.tag)
            current = parents.get(current)
        paths.append("/" + "/".join(reversed(levels)))
    return paths


def annotate(root: ET.Element, paths: List[str]) -> str:
    """Serialise ``root`` behind a comment summarising ``paths``."""
    sample = "\n".join(paths[:SAMPLE_PATHS])
    header = f"<!-- \nGenerated XML with all available XPaths\nTotal XPaths found: {len(paths)}\nSample XPaths:\n{sample}\n-->\n"
    return header + ET.tostring(root, encoding="unicode")


class PageSourceSnapshotProvider:
    """Snapshot the screen through the driver's page source."""

    def __init__(self, driver: Any, output_dir: str = "xml_snapshots", clean_on_start: bool = True) -> None:
        self.driver = driver
        self.output_dir = Path(output_dir)
        self.logger = get_logger(self.__class__.__name__)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        if clean_on_start:
            self._remove_files(suffixes=(".xml", ".txt"))

    @classmethod
    def from_config(cls, driver: Any, config: Any) -> "PageSourceSnapshotProvider":
        return cls(
            driver,
            str(config.get("snapshots.directory", "xml_snapshots")),
            config.get_bool("snapshots.clean_on_start", True),
        )

    def capture_snapshot(self) -> str:
        """Return the annotated page source of the current screen."""
        source = self.driver.page_source()
        try:
            root = ET.fromstring(source)
        except ET.ParseError as exc:
            self.logger.warning("Page source is not well-formed XML (%s); using it verbatim", exc)
            self._save(source, [])
            return source.strip()
        paths = element_paths(root)
        snapshot = annotate(root, paths)
        self._save(snapshot, paths)
        return snapshot.strip()

    def _save(self, snapshot: str, paths: List[str]) -> None:
        stamp = _dt.datetime.now().strftime(TIMESTAMP_FORMAT)
        xml_path = self.output_dir / f"snapshot_{stamp}.xml"
        paths_path = self.output_dir / f"xpaths_{stamp}.txt"
        xml_path.write_text(snapshot, encoding="utf-8")
        paths_path.write_text(f"All XPaths found in XML ({len(paths)} total):\n" + "\n".join(paths), encoding="utf-8")
        self.logger.info("Saved XML snapshot to %s", xml_path.resolve())

    def _remove_files(self, suffixes: Optional[tuple] = None) -> int:
        removed = 0
        for path in self.output_dir.iterdir():
            if path.is_file() and (suffixes is None or path.suffix in suffixes):
                path.unlink()
                removed += 1
        return removed

    def clear(self) -> None:
        """Delete every file in the snapshot directory."""
        removed = self._remove_files()
        self.logger.info("Cleared %s file(s) from %s", removed, self.output_dir)


__all__ = ["PageSourceSnapshotProvider", "element_paths", "annotate"]

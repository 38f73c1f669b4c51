"""File-backed store for persisted flow records (one JSON file per flow)."""
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FlowStore:
    """CRUD over ``{id, name, description, nodes, edges, createdAt, updatedAt}``.

    Records hold the editor's flat graph, not the execution JSON.
    Last write wins.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, flow_id: str) -> Path:
        return self.directory / f"{flow_id}.json"

    def _write(self, record: dict[str, Any]) -> None:
        self._path(record["id"]).write_text(json.dumps(record, indent=2))

    def create(self, name: str, nodes: list, edges: list, description: str | None = None) -> dict[str, Any]:
        now = _now()
        record = {
            "id": str(uuid.uuid4()),
            "name": name,
            "description": description,
            "nodes": nodes,
            "edges": edges,
            "createdAt": now,
            "updatedAt": now,
        }
        self._write(record)
        logger.info("Created flow %s (%s)", record["id"], name)
        return record

    def get(self, flow_id: str) -> dict[str, Any] | None:
        path = self._path(flow_id)
        if not path.is_file():
            return None
        return json.loads(path.read_text())

    def list(self) -> list[dict[str, Any]]:
        records = []
        for path in sorted(self.directory.glob("*.json")):
            try:
                records.append(json.loads(path.read_text()))
            except (OSError, ValueError):
                logger.warning("Skipping unreadable flow file %s", path.name)
                continue
        records.sort(key=lambda r: r.get("createdAt", ""))
        return records

    def update(self, flow_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        record = self.get(flow_id)
        if record is None:
            return None
        for key in ("name", "description", "nodes", "edges"):
            if key in changes:
                record[key] = changes[key]
        record["updatedAt"] = _now()
        self._write(record)
        logger.info("Updated flow %s", flow_id)
        return record

    def delete(self, flow_id: str) -> bool:
        path = self._path(flow_id)
        if not path.is_file():
            return False
        path.unlink()
        logger.info("Deleted flow %s", flow_id)
        return True

"""Default detached worker spawned by the post-add hook.

Records the component snapshot it was started for in `<data_dir>/ci.jsonl`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from comptrack.ci import ENV_COMPONENT_ID, ENV_DATA_DIR
from comptrack.index import ComponentIndex
from comptrack.logging import AuditEvent, JsonlAuditLogger, utc_timestamp

CI_LOG_FILENAME = "ci.jsonl"


def run_worker(component_id: str, data_dir: Path) -> int:
    """Append one CI event for `component_id`; return a process exit code."""
    record = ComponentIndex(data_dir).load().get(component_id, lenient=True)
    metadata: dict[str, object] = {"component_id": component_id}
    if record is not None:
        metadata["file_count"] = len(record.files)
        metadata["main_file"] = record.main_file
    JsonlAuditLogger(data_dir / CI_LOG_FILENAME).append(
        AuditEvent(
            timestamp=utc_timestamp(),
            command="ci",
            ok=record is not None,
            error_code=None if record is not None else "COMPONENT_NOT_FOUND",
            metadata=metadata,
        )
    )
    return 0 if record is not None else 1


def main() -> int:
    component_id = os.environ.get(ENV_COMPONENT_ID, "")
    data_dir = os.environ.get(ENV_DATA_DIR, "")
    if not component_id or not data_dir:
        print(f"{ENV_COMPONENT_ID} and {ENV_DATA_DIR} must be set.", file=sys.stderr)
        return 2
    return run_worker(component_id, Path(data_dir))


if __name__ == "__main__":
    raise SystemExit(main())

"""
Checkpoint Store

Keeps a long dork scan restartable. After every fully processed dork
the scanner records the index, the set of processed dorks and the
report text gathered so far. On the next run, everything up to that
index (and any dork already in the set) is skipped.

The file is replaced wholesale (temp file + rename) so a crash or
Ctrl+C mid-write leaves either the previous checkpoint or the new one,
never half of each. A finished scan deletes the file.

Format:
    {"lastIndex": 41, "reportContent": "...", "processedDorks": [...],
     "timestamp": "2024-01-01T00:00:00+00:00"}
"""
import json
import os
import tempfile
from pathlib import Path

from rich.markup import escape

from dorkscan.errors import PersistenceError
from dorkscan.models import Checkpoint
from dorkscan.utils import info, iso_now, success, warning


class CheckpointStore:
    def __init__(self, path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Checkpoint:
        """Saved checkpoint, or an empty one (last_index -1) if absent or unreadable."""
        if not self.path.exists():
            return Checkpoint()

        info("Checkpoint found. Loading previous progress...")
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                checkpoint = Checkpoint.from_dict(json.load(f))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            warning(f"Ignoring unreadable checkpoint {escape(str(self.path))}: {escape(str(e))}")
            return Checkpoint()

        success(f"Checkpoint loaded: processed up to dork #{checkpoint.last_index}")
        return checkpoint

    def save(self, index: int, report_content: str = None, processed_dorks=()) -> Checkpoint:
        """Atomically replace the checkpoint file. Raises PersistenceError."""
        checkpoint = Checkpoint(
            last_index=index,
            processed_dorks=set(processed_dorks),
            report_content=report_content,
            saved_at=iso_now(),
        )
        payload = json.dumps(checkpoint.to_dict(), indent=2, ensure_ascii=False)

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
            raise PersistenceError(f"Could not save checkpoint to {self.path}: {e}") from e

        info(f"Checkpoint saved: processed up to dork #{index}")
        return checkpoint

    def clear(self) -> bool:
        """Delete the checkpoint file. Returns False if there was none."""
        if not self.path.exists():
            return False
        try:
            self.path.unlink()
        except OSError as e:
            raise PersistenceError(f"Could not delete checkpoint {self.path}: {e}") from e
        return True


def load_checkpoint(path) -> Checkpoint:
    return CheckpointStore(path).load()


def save_checkpoint(path, index: int, report_content: str = None, processed_dorks=()) -> Checkpoint:
    return CheckpointStore(path).save(index, report_content, processed_dorks)

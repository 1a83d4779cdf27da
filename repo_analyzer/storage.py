"""
Persistence gateway for analyzed repositories.

Saves finished trees to a JSONL file, one record per line.
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import List

from models import FileTreeNode, StoredRepository


logger = logging.getLogger(__name__)


class RepositoryStore:
    """
    Stores analyzed repositories in repositories.jsonl.

    Records are appended on save and the file is rewritten on delete. Ids
    increase monotonically across the life of the file.
    """

    FILE_NAME = "repositories.jsonl"

    def __init__(self, output_dir: str = "output"):
        """
        Initialize repository store.

        Args:
            output_dir: Directory holding the JSONL file
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.repositories_file = self.output_dir / self.FILE_NAME

        self._lock = threading.Lock()
        self._next_id = self._load_next_id()

    def save(self, caller: str, repo_url: str, tree: FileTreeNode) -> StoredRepository:
        """
        Save a finished tree.

        Args:
            caller: Caller identity owning the record
            repo_url: Source address the tree was crawled from
            tree: Root node of the crawl

        Returns:
            The stored record with its assigned id
        """
        with self._lock:
            record = StoredRepository(
                id=self._next_id,
                caller=caller,
                repo_url=repo_url,
                tree=tree,
                created_at=datetime.now(),
            )
            self._next_id += 1
            self._append_jsonl(record.to_dict())

        logger.info("Saved repository %d for %s (%s)", record.id, caller, repo_url)
        return record

    def find_by_caller(self, caller: str) -> List[StoredRepository]:
        """Return a caller's records, newest first."""
        with self._lock:
            records = [r for r in self._read_all() if r.caller == caller]
        return sorted(records, key=lambda r: r.created_at, reverse=True)

    def delete(self, caller: str, repository_id: int) -> bool:
        """
        Delete a record owned by a caller.

        Returns:
            True if a record was removed
        """
        with self._lock:
            records = self._read_all()
            kept = [r for r in records if not (r.id == repository_id and r.caller == caller)]
            if len(kept) == len(records):
                return False
            self._write_all(kept)
        logger.info("Deleted repository %d for %s", repository_id, caller)
        return True

    def _load_next_id(self) -> int:
        records = self._read_all()
        return max((r.id for r in records), default=0) + 1

    def _read_all(self) -> List[StoredRepository]:
        if not self.repositories_file.exists():
            return []

        records = []
        with open(self.repositories_file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(StoredRepository.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping unreadable record in %s: %s", self.repositories_file, e)
        return records

    def _write_all(self, records: List[StoredRepository]) -> None:
        tmp_file = self.repositories_file.with_suffix(".jsonl.tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            for record in records:
                json.dump(record.to_dict(), f, ensure_ascii=False)
                f.write("\n")
        tmp_file.replace(self.repositories_file)

    def _append_jsonl(self, data: dict) -> None:
        with open(self.repositories_file, "a", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False)
            f.write("\n")

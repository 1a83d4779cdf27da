"""
Data models for the Repository Analyzer.

All models are dataclasses. Tree nodes serialize to the JSON shape stored by the
persistence gateway and returned to callers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Any
from enum import Enum


# Files at or above this size are dropped from the tree entirely
MAX_FILE_SIZE = 1024 * 1024


class NodeKind(str, Enum):
    """Kind of a tree node."""
    FILE = "file"
    DIRECTORY = "folder"


class AnalysisStatus(str, Enum):
    """Terminal state of one analysis request."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class ListingEntry:
    """One entry of an upstream directory listing."""
    name: str
    kind: NodeKind
    path: str
    size: Optional[int] = None
    download_ref: Optional[str] = None

    @property
    def is_directory(self) -> bool:
        return self.kind == NodeKind.DIRECTORY


@dataclass
class FileTreeNode:
    """
    One file or directory in an analyzed repository.

    A File carries size and download_ref and never children. A Directory
    carries children (possibly empty) and never size or download_ref.
    """
    name: str
    kind: NodeKind
    path: str
    depth: int
    size: Optional[int] = None
    download_ref: Optional[str] = None
    children: Optional[List["FileTreeNode"]] = None
    truncated: bool = False
    message: Optional[str] = None

    @classmethod
    def file(
        cls,
        name: str,
        path: str,
        depth: int,
        size: Optional[int],
        download_ref: Optional[str],
    ) -> "FileTreeNode":
        """Create a File node."""
        return cls(
            name=name,
            kind=NodeKind.FILE,
            path=path,
            depth=depth,
            size=size,
            download_ref=download_ref,
        )

    @classmethod
    def directory(cls, name: str, path: str, depth: int) -> "FileTreeNode":
        """Create an empty Directory node."""
        return cls(name=name, kind=NodeKind.DIRECTORY, path=path, depth=depth, children=[])

    @property
    def is_directory(self) -> bool:
        return self.kind == NodeKind.DIRECTORY

    def iter_nodes(self):
        """Yield this node and every descendant, depth-first in listing order."""
        yield self
        for child in self.children or []:
            yield from child.iter_nodes()

    def count_files(self) -> int:
        """Count File nodes in this subtree."""
        return sum(1 for node in self.iter_nodes() if not node.is_directory)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.kind.value,
            "path": self.path,
            "depth": self.depth,
        }
        if self.is_directory:
            data["children"] = [child.to_dict() for child in self.children or []]
            if self.truncated:
                data["truncated"] = True
                data["message"] = self.message
        else:
            data["size"] = self.size
            data["download_url"] = self.download_ref
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileTreeNode":
        """Rebuild a node (and its subtree) from to_dict() output."""
        kind = NodeKind(data["type"])
        if kind == NodeKind.DIRECTORY:
            node = cls.directory(data["name"], data.get("path", ""), data.get("depth", 0))
            node.children = [cls.from_dict(child) for child in data.get("children", [])]
            node.truncated = data.get("truncated", False)
            node.message = data.get("message")
            return node
        return cls.file(
            data["name"],
            data.get("path", ""),
            data.get("depth", 0),
            data.get("size"),
            data.get("download_url"),
        )


@dataclass
class SessionSnapshot:
    """Point-in-time copy of a session's progress fields."""
    session_id: str
    progress_percent: int
    current_depth: int
    current_path: str
    cancelled: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active": True,
            "progress": self.progress_percent,
            "current_depth": self.current_depth,
            "current_path": self.current_path,
            "cancelled": self.cancelled,
        }


@dataclass
class AnalysisSession:
    """Bookkeeping record for one in-flight crawl."""
    session_id: str
    caller: str
    started_at: datetime
    progress_percent: int = 0
    current_depth: int = 0
    current_path: str = ""

    def snapshot(self, cancelled: bool) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            progress_percent=self.progress_percent,
            current_depth=self.current_depth,
            current_path=self.current_path,
            cancelled=cancelled,
        )


@dataclass
class StoredRepository:
    """A finished tree as saved by the persistence gateway."""
    id: int
    caller: str
    repo_url: str
    tree: FileTreeNode
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.caller,
            "repo_url": self.repo_url,
            "repo_data": self.tree.to_dict(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredRepository":
        return cls(
            id=data["id"],
            caller=data["user_id"],
            repo_url=data["repo_url"],
            tree=FileTreeNode.from_dict(data["repo_data"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class AnalysisResult:
    """Outcome of one analysis request: a tree, a cancellation, or a failure."""
    status: AnalysisStatus
    owner: Optional[str] = None
    repository: Optional[str] = None
    max_depth: Optional[int] = None
    tree: Optional[FileTreeNode] = None
    stored: Optional[StoredRepository] = None
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.status == AnalysisStatus.COMPLETED

    @property
    def cancelled(self) -> bool:
        return self.status == AnalysisStatus.CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        if self.status == AnalysisStatus.CANCELLED:
            return {"status": self.status.value, "message": "Analysis cancelled by user"}
        if self.status == AnalysisStatus.FAILED:
            return {
                "status": self.status.value,
                "message": "Failed to analyze repository",
                "error": self.error,
            }
        return {
            "status": self.status.value,
            "message": "Repository analyzed successfully",
            "repoInfo": {"owner": self.owner, "repo": self.repository},
            "fileTree": self.tree.to_dict() if self.tree else None,
            "analysisConfig": {"maxDepth": self.max_depth},
        }


@dataclass
class FileSummary:
    """AI summary of a single file."""
    file_name: str
    analysis: str
    model: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "analysis": self.analysis,
            "model": self.model,
            "timestamp": self.created_at.isoformat(),
        }

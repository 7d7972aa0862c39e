from typing import Dict, Any
from pathlib import Path
import asyncio
import structlog

logger = structlog.get_logger(__name__)


class FileStore:
    """Filesystem persistence for structured documents under the documents root"""

    def __init__(self, documents_root: Path):
        self.documents_root = Path(documents_root).resolve()

    def resolve(self, relative_path: str) -> Path:
        """Resolve a root-relative path, refusing anything outside the root"""

        target = (self.documents_root / relative_path.lstrip("/")).resolve()
        if target != self.documents_root and self.documents_root not in target.parents:
            raise ValueError(f"Path escapes the documents root: {relative_path}")
        return target

    async def has_content(self, relative_path: str) -> bool:
        """Check whether a file or non-empty directory exists at the path"""

        target = self.resolve(relative_path)
        return await asyncio.to_thread(self._has_content, target)

    @staticmethod
    def _has_content(target: Path) -> bool:
        if target.is_file():
            return True
        if target.is_dir():
            return any(target.iterdir())
        return False

    async def write_text(self, relative_path: str, content: str) -> Path:
        """Write a whole file, creating parent directories as needed"""

        target = self.resolve(relative_path)
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(target.write_text, content, encoding="utf-8")

        logger.debug("File written", path=str(target), size=len(content))
        return target

    def get_stats(self) -> Dict[str, Any]:
        """Describe the store for health reporting"""

        return {
            "documents_root": str(self.documents_root),
            "exists": self.documents_root.is_dir()
        }

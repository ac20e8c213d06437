"""
Workspace Files

Reads the inputs of a compliance run from a workspace directory: tool
output, the list of source files, the GRP and the source files themselves.

Guards:
  • Refuses binary files (null-byte check)
  • Decodes as ISO-8859-1 so any byte sequence round-trips to the audit log
"""

import logging
import os
import re
from typing import List

logger = logging.getLogger(__name__)

FILE_ENCODING = "iso-8859-1"

_LINE_BREAKS = re.compile(r"[\r\n]+")


class WorkspaceFiles:
    def __init__(self, workspace_root: str):
        self.workspace_root = os.path.abspath(workspace_root)

    def resolve(self, file_path: str) -> str:
        # Normalise separators so 'src/main.c' works on Windows too
        native = file_path.replace("/", os.sep).replace("\\", os.sep)
        return os.path.join(self.workspace_root, native)

    def read_file(self, file_path: str) -> str:
        """Full text of a workspace file.  Raises OSError when it cannot be read."""
        full_path = self.resolve(file_path)
        with open(full_path, "rb") as fb:
            data = fb.read()
        if b"\x00" in data[:8192]:
            raise OSError(f"{file_path} looks like a binary file")
        return data.decode(FILE_ENCODING)

    def read_lines(self, file_path: str) -> List[str]:
        """Non-empty lines of a workspace file.  Raises OSError when it cannot be read."""
        content = self.read_file(file_path)
        if not content:
            logger.warning("\"%s\" is empty", file_path)
        return [line for line in _LINE_BREAKS.split(content) if line]

    def relative_paths(self, paths: List[str]) -> List[str]:
        """Make absolute paths relative to the workspace; relative ones pass through."""
        relative = []
        for path in paths:
            path = path.strip()
            if not path:
                continue
            if os.path.isabs(path):
                path = os.path.relpath(path, self.workspace_root).replace("\\", "/")
            relative.append(path)
        return relative

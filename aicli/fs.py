"""Tools provider exposing local file system access."""

from __future__ import annotations

import json
import os
import stat
from datetime import datetime
from typing import Any, Dict, List, Optional

from . import tools
from .api import Tool, ToolParameter, ToolParameterType
from .config import Config
from .tools import ToolsAttributes, ToolsProvider


def _type_string(mode: int) -> str:
    if stat.S_ISDIR(mode):
        kind = "d"
    elif stat.S_ISLNK(mode):
        kind = "L"
    elif stat.S_ISFIFO(mode):
        kind = "p"
    elif stat.S_ISSOCK(mode):
        kind = "S"
    elif stat.S_ISBLK(mode):
        kind = "D"
    elif stat.S_ISCHR(mode):
        kind = "Dc"
    else:
        kind = "-"
    return kind + "-" * 9


def file_list(args: Dict[str, Any]) -> str:
    """List a directory as JSON, defaulting to the working directory."""
    directory = args.get("directory")
    if not isinstance(directory, str) or not directory:
        directory = "."
    with os.scandir(directory) as entries:
        ordered = sorted(entries, key=lambda e: e.name)
    infos: List[Dict[str, Any]] = []
    for entry in ordered:
        info: Dict[str, Any] = {"name": entry.name}
        try:
            details = entry.stat(follow_symlinks=False)
        except OSError:
            info["type"] = _type_string(stat.S_IFDIR if entry.is_dir(follow_symlinks=False) else 0)
        else:
            info["type"] = _type_string(details.st_mode)
            info["size"] = details.st_size
            info["mod_time"] = datetime.fromtimestamp(details.st_mtime).strftime("%Y-%m-%d %H:%M:%S")
        infos.append(info)
    # An empty directory is reported as JSON null.
    return json.dumps(infos or None, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


FILE_LIST = Tool(
    name="file_list",
    description=(
        "List files in the provided directory or the current working directory if none is provided."
        "Returns a JSON representation of the files, including their names and metadata."
    ),
    function=file_list,
    parameters={
        "directory": ToolParameter(
            type=ToolParameterType.STRING,
            description=(
                "The directory to list files from. If not provided, "
                "the current working directory will be used."
            ),
            required=False,
        )
    },
)


class FsProvider(ToolsProvider):
    """Provides file system tools; available whenever it has tools to offer."""

    def attributes(self) -> ToolsAttributes:
        return ToolsAttributes(name="fs")

    def is_available(self, config: Optional[Config]) -> bool:
        return bool(self.get_tools(config))

    def get_tools(self, config: Optional[Config]) -> List[Tool]:
        return [FILE_LIST]

    def to_json(self) -> str:
        return json.dumps(self.attributes().to_dict())


tools.register(FsProvider())
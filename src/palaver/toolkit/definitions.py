"""Built-in file tools.

Each tool has a pydantic arguments model (its JSON Schema is what the
model sees) and a handler bound to a root directory.  Arguments models
forbid extra fields so hallucinated parameters are rejected before the
handler runs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from palaver.exceptions import FileReadError
from palaver.toolkit.models import ToolDefinition

logger = logging.getLogger(__name__)


class ReadFileArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_path: str = Field(
        alias="filePath",
        min_length=1,
        description="Path of the file to read, relative to the working directory.",
    )


class ListFilesArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: Optional[str] = Field(
        default=None,
        description="Directory to list, relative to the working directory. "
        "Defaults to the working directory itself.",
    )


def get_builtin_tools(root: str | Path | None = None) -> list[ToolDefinition]:
    """Build the built-in tool definitions.

    Args:
        root: Directory that relative paths resolve against.
            Defaults to the current working directory.

    Returns:
        List of ToolDefinition objects (read_file, list_files).
    """
    base = Path(root) if root is not None else Path.cwd()
    return [
        ToolDefinition(
            name="read_file",
            description=(
                "Read the contents of a file. Use this when you want to see "
                "what is inside a file. Fails if the file does not exist, "
                "cannot be decoded as text, or is empty."
            ),
            arguments=ReadFileArgs,
            handler=lambda args: _handle_read_file(base, args),
        ),
        ToolDefinition(
            name="list_files",
            description=(
                "List the entries of a directory, one per line. Directories "
                "end with '/'. Use this to find files before reading them."
            ),
            arguments=ListFilesArgs,
            handler=lambda args: _handle_list_files(base, args),
        ),
    ]


def _resolve(base: Path, raw: str) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else base / path


def _handle_read_file(base: Path, args: ReadFileArgs) -> str:
    target = _resolve(base, args.file_path)
    try:
        contents = target.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileReadError(args.file_path, "no such file") from None
    except IsADirectoryError:
        raise FileReadError(args.file_path, "is a directory") from None
    except UnicodeDecodeError:
        raise FileReadError(args.file_path, "not a UTF-8 text file") from None
    except OSError as exc:
        raise FileReadError(args.file_path, exc.strerror or str(exc)) from exc
    if not contents:
        raise FileReadError(args.file_path, "file is empty")
    logger.debug("read_file %s: %d chars", target, len(contents))
    return contents


def _handle_list_files(base: Path, args: ListFilesArgs) -> str:
    raw = args.path or "."
    target = _resolve(base, raw)
    try:
        entries = sorted(target.iterdir(), key=lambda p: p.name)
    except FileNotFoundError:
        raise FileReadError(raw, "no such directory") from None
    except NotADirectoryError:
        raise FileReadError(raw, "not a directory") from None
    except OSError as exc:
        raise FileReadError(raw, exc.strerror or str(exc)) from exc
    if not entries:
        return "(empty directory)"
    return "\n".join(p.name + "/" if p.is_dir() else p.name for p in entries)

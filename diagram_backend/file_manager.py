"""
Diagram File Manager - Load and save diagrams as SVG files.

A diagram file is an SVG picture whose root element carries the model in
a `content` attribute, the way draw.io exports editable SVGs:

    <svg content="<mxfile><diagram name=...><mxGraphModel>...</mxGraphModel></diagram></mxfile>">
      ...preview...
    </svg>

The payload of <diagram> may also be draw.io's compressed form
(deflate + base64 of the URL-encoded XML); both are read, only the plain
form is written.

There is no locking: two writers saving the same file race and the last
write wins.
"""

import base64
import logging
import xml.etree.ElementTree as ET
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
from urllib.parse import unquote

from diagram_core import codec
from diagram_core.editor import DiagramEditor
from diagram_core.errors import InvalidPathError
from diagram_core.models import Diagram

from . import config
from .preview import render_preview


logger = logging.getLogger(__name__)

DIAGRAM_SUFFIX = ".svg"
MXFILE_HOST = "diagram-svg-tool"


def _decode_drawio_data(data: str) -> str:
    """Decode draw.io compressed diagram data; return the input if it isn't compressed."""
    try:
        inflated = zlib.decompress(base64.b64decode(data, validate=True), -15)
        return unquote(inflated.decode("utf-8"))
    except (ValueError, zlib.error, UnicodeDecodeError):
        return data


def _decode_mxfile(mxfile: ET.Element) -> Diagram:
    diagram_elem = mxfile.find("diagram")
    if diagram_elem is None:
        return Diagram()

    name = diagram_elem.get("name", "Page-1")
    model = diagram_elem.find("mxGraphModel")
    if model is not None:
        return codec.decode_model(model, name=name)

    payload = (diagram_elem.text or "").strip()
    if not payload:
        return Diagram(name=name)
    return codec.from_xml(_decode_drawio_data(payload), name=name)


class DiagramFileManager:
    """
    Reads and writes diagram files.

    Paths must end in .svg. When a workspace is configured (argument or
    DIAGRAM_TOOL_WORKSPACE), relative paths resolve inside it and no path
    may point outside it.
    """

    def __init__(self, workspace: Optional[Path] = None):
        self._workspace = Path(workspace).expanduser().resolve() if workspace is not None else None

    @property
    def workspace(self) -> Optional[Path]:
        return self._workspace if self._workspace is not None else config.workspace_dir()

    def resolve_path(self, file_path: str | Path) -> Path:
        """Resolve and check a diagram path; raises InvalidPathError."""
        if not str(file_path).strip():
            raise InvalidPathError("A diagram file path is required")

        path = Path(file_path).expanduser()
        workspace = self.workspace
        if workspace is not None:
            path = (workspace / path).resolve()
            try:
                path.relative_to(workspace)
            except ValueError:
                raise InvalidPathError(f"Path '{file_path}' escapes the workspace directory") from None
        else:
            path = path.resolve()

        if path.suffix.lower() != DIAGRAM_SUFFIX:
            raise InvalidPathError(f"Diagram files must have a {DIAGRAM_SUFFIX} extension: {file_path}")
        if path.is_dir():
            raise InvalidPathError(f"Path is a directory: {file_path}")
        return path

    def load(self, file_path: str | Path) -> DiagramEditor:
        """
        Load a diagram file into a fresh editor.

        A missing or empty file yields an empty diagram.
        """
        path = self.resolve_path(file_path)
        if not path.exists():
            logger.info("No diagram at %s, starting empty", path)
            return DiagramEditor()

        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise InvalidPathError(f"Not a diagram file: {path}") from None
        if not text.strip():
            return DiagramEditor()

        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise InvalidPathError(f"Not a diagram file: {path}: {e}") from None

        tag = root.tag.rsplit("}", 1)[-1]
        if tag == "svg":
            content = root.get("content")
            if not content:
                logger.warning("SVG without diagram metadata at %s, starting empty", path)
                return DiagramEditor()
            try:
                root = ET.fromstring(content)
            except ET.ParseError as e:
                raise InvalidPathError(f"Corrupt diagram metadata in {path}: {e}") from None
            tag = root.tag

        if tag == "mxfile":
            try:
                diagram = _decode_mxfile(root)
            except ET.ParseError as e:
                raise InvalidPathError(f"Corrupt diagram data in {path}: {e}") from None
        elif tag == "mxGraphModel":
            diagram = codec.decode_model(root)
        else:
            raise InvalidPathError(f"Not a diagram file: {path}")

        logger.info("Loaded %s (%d nodes, %d edges)", path, len(diagram.nodes), len(diagram.edges))
        return DiagramEditor(diagram)

    def render(self, editor: DiagramEditor) -> str:
        """The full file contents for a diagram: SVG preview plus metadata."""
        mxfile = ET.Element("mxfile", {"host": MXFILE_HOST})
        diagram_elem = ET.SubElement(mxfile, "diagram", {"id": "page-1", "name": editor.diagram.name})
        diagram_elem.append(codec.encode_model(editor.diagram))
        content = ET.tostring(mxfile, encoding="unicode")
        return render_preview(editor.diagram, content)

    def save(self, editor: DiagramEditor, file_path: str | Path) -> Path:
        """Write the diagram to disk and return the resolved path."""
        path = self.resolve_path(file_path)

        # Ensure parent directory exists
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(editor), encoding="utf-8")

        logger.info(
            "Saved %s (%d nodes, %d edges)",
            path, len(editor.diagram.nodes), len(editor.diagram.edges),
        )
        return path

    @contextmanager
    def edit(self, file_path: str | Path) -> Iterator[DiagramEditor]:
        """
        Load a diagram, hand it out for mutation, then save it once.

        If the block raises, nothing is written.
        """
        path = self.resolve_path(file_path)
        editor = self.load(path)
        yield editor
        self.save(editor, path)


# Global instance for the application
file_manager = DiagramFileManager()

#!/usr/bin/env python3
"""MSBuild and Visual C++ project rewriting.

MSBuild projects (.csproj, .vbproj, .dbproj, .vcxproj, .cfxproj, .wixproj)
are parsed as XML and edited in place:
- source-control properties (``SccProjectName`` ...) are removed
- ``HintPath`` values pointing outside the source tree into a shared system
  location (Program Files, Windows, /usr ...) are made absolute
- linked compile items (``<Compile Include="..\\Shared\\A.cs"><Link>A.cs</Link>``)
  are turned into plain items; the linked file is copied next to the project

Legacy Visual C++ projects (.vcproj) keep their binding as attributes of the
root element; those attributes are removed.

Malformed XML raises ``TransformError`` so the caller can copy the file as is.
"""

import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from srcexport.core.constants import (
    MSBUILD_NAMESPACE,
    MSBUILD_PROJECT_EXTENSIONS,
    SCM_PROPERTIES,
    VC_PROJECT_EXTENSIONS,
)
from srcexport.core.logging import ExportEvent
from srcexport.transforms.base import Transform, TransformError

NS = {"msbuild": MSBUILD_NAMESPACE}

# Serialize MSBuild elements without a prefix
ET.register_namespace("", MSBUILD_NAMESPACE)

WINDOWS_SYSTEM_FOLDER_VARIABLES = (
    "ProgramFiles",
    "ProgramFiles(x86)",
    "ProgramW6432",
    "CommonProgramFiles",
    "CommonProgramFiles(x86)",
    "CommonProgramW6432",
    "ProgramData",
    "PUBLIC",
    "SystemRoot",
    "windir",
)
POSIX_SYSTEM_FOLDERS = ("/usr", "/opt", "/lib", "/Library", "/System", "/Applications")


class HintPathOutcome(Enum):
    """What happened to a hint path."""

    RESOLVED = "resolved"
    LEFT_UNCHANGED = "left_unchanged"


@dataclass(frozen=True)
class HintPathResolution:
    """Outcome of resolving one hint path."""

    outcome: HintPathOutcome
    value: str


def system_folders() -> List[str]:
    """Shared system locations a hint path may be absolutized into."""
    if os.name == "nt":
        folders = [os.environ.get(name) for name in WINDOWS_SYSTEM_FOLDER_VARIABLES]
        system_root = os.environ.get("SystemRoot")
        if system_root:
            folders.append(os.path.join(system_root, "System32"))
            folders.append(os.path.join(system_root, "SysWOW64"))
        return [folder for folder in folders if folder]
    return list(POSIX_SYSTEM_FOLDERS)


def to_native_path(value: str) -> str:
    """Convert a project-file path (backslash separated) to the local convention."""
    if os.sep == "/":
        return value.replace("\\", "/")
    return value


def is_child_or_equal(parent: str, path: str) -> bool:
    """Check whether ``path`` lies inside (or is) ``parent``."""
    parent = os.path.normcase(os.path.normpath(parent))
    path = os.path.normcase(os.path.normpath(path))
    try:
        return os.path.commonpath([parent, path]) == parent
    except ValueError:
        # Different drives
        return False


def resolve_hint_path(
    value: str, source_root: str, allowed_folders: Optional[Sequence[str]] = None
) -> HintPathResolution:
    """Decide whether a hint path should be made absolute.

    A hint path is absolutized only when it resolves outside the source root
    and lands inside one of the allowed shared system folders; any failure
    leaves it untouched.

    Args:
        value: Hint path as written in the project
        source_root: Export source root
        allowed_folders: Shared folders (defaults to ``system_folders()``)

    Returns:
        Resolution outcome and the value to write back
    """
    unchanged = HintPathResolution(HintPathOutcome.LEFT_UNCHANGED, value)
    if not value or not value.strip():
        return unchanged

    if allowed_folders is None:
        allowed_folders = system_folders()

    try:
        path = os.path.join(source_root, to_native_path(value.strip()))
        if is_child_or_equal(source_root, path):
            return unchanged

        path = os.path.abspath(path)
        for folder in allowed_folders:
            if folder and is_child_or_equal(folder, path):
                return HintPathResolution(HintPathOutcome.RESOLVED, path)
    except (OSError, ValueError, TypeError):
        return unchanged

    return unchanged


def parse_xml(content: bytes, path: str, transform_name: str) -> ET.ElementTree:
    """Parse project XML keeping comments and processing instructions.

    Raises:
        TransformError: If the content is not well-formed XML
    """
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    try:
        parser.feed(content)
        root = parser.close()
    except ET.ParseError as e:
        raise TransformError(f"Invalid project file {path}: {e}", transform_name)
    return ET.ElementTree(root)


def serialize_xml(tree: ET.ElementTree) -> bytes:
    """Serialize a project document with an XML declaration."""
    return ET.tostring(tree.getroot(), encoding="utf-8", xml_declaration=True)


def _qualified(tag: str) -> str:
    return f"{{{MSBUILD_NAMESPACE}}}{tag}"


class MSBuildProjectTransform(Transform):
    """Rewrites MSBuild project files.

    Metadata used by ``transform``:
        source_root: Export source root (for hint paths)
        destination: Destination path of the project (for linked files)
        copy_file: ``callable(src, dst)`` copying a linked file
        log: Optional ``ExportLog`` receiving diagnostics
    """

    extensions = tuple(MSBUILD_PROJECT_EXTENSIONS)

    def __init__(
        self,
        remove_scm_binding: bool = False,
        convert_relative_hint_paths: bool = False,
        replace_link_files: bool = False,
        allowed_folders: Optional[Sequence[str]] = None,
        name: str = "msbuild_project",
    ):
        """Initialize MSBuild transform.

        Args:
            remove_scm_binding: Remove source-control properties
            convert_relative_hint_paths: Absolutize hint paths into system folders
            replace_link_files: Inline linked compile items
            allowed_folders: Override of the shared system folders
            name: Transform name
        """
        super().__init__(
            name=name,
            enabled=remove_scm_binding or convert_relative_hint_paths or replace_link_files,
        )
        self.remove_scm_binding = remove_scm_binding
        self.convert_relative_hint_paths = convert_relative_hint_paths
        self.replace_link_files = replace_link_files
        self.allowed_folders = allowed_folders

    def transform(
        self, content: bytes, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> bytes:
        metadata = metadata or {}
        tree = parse_xml(content, path, self.name)
        root = tree.getroot()

        if self.remove_scm_binding:
            self.remove_scm_properties(root)

        if self.convert_relative_hint_paths:
            source_root = metadata.get("source_root") or os.path.dirname(path)
            self.absolutize_hint_paths(root, source_root)

        if self.replace_link_files:
            self.inline_link_files(
                root,
                os.path.dirname(path),
                os.path.dirname(metadata.get("destination") or path),
                metadata.get("copy_file"),
                metadata.get("log"),
            )

        return serialize_xml(tree)

    def remove_scm_properties(self, root: ET.Element) -> int:
        """Remove source-control property elements anywhere in the document.

        Returns:
            Number of elements removed
        """
        targets = {_qualified(tag) for tag in SCM_PROPERTIES}
        removed = 0
        for parent in list(root.iter()):
            for child in list(parent):
                if child.tag in targets:
                    parent.remove(child)
                    removed += 1
        return removed

    def absolutize_hint_paths(self, root: ET.Element, source_root: str) -> List[HintPathResolution]:
        """Rewrite hint paths pointing into shared system folders."""
        resolutions = []
        for element in root.iter(_qualified("HintPath")):
            if element.text is None:
                continue
            resolution = resolve_hint_path(element.text, source_root, self.allowed_folders)
            if resolution.outcome is HintPathOutcome.RESOLVED:
                element.text = resolution.value
            resolutions.append(resolution)
        return resolutions

    def inline_link_files(
        self,
        root: ET.Element,
        source_dir: str,
        destination_dir: str,
        copy_file: Optional[Callable[[str, str], None]],
        log=None,
    ) -> int:
        """Copy linked compile items next to the project and drop the link.

        Returns:
            Number of items rewritten
        """
        if root.tag != _qualified("Project"):
            return 0

        rewritten = 0
        for item in root.findall("msbuild:ItemGroup/msbuild:Compile[@Include]", NS):
            link = item.find("msbuild:Link", NS)
            if link is None or not link.text:
                continue

            include = item.get("Include")
            source = os.path.normpath(os.path.join(source_dir, to_native_path(include)))
            destination = os.path.normpath(os.path.join(destination_dir, to_native_path(link.text)))

            if not os.path.isfile(source):
                if log is not None:
                    log.emit(ExportEvent.DIAGNOSTIC, f"Linked file not found: {source}")
                continue

            if copy_file is not None:
                copy_file(source, destination)

            item.remove(link)
            item.set("Include", link.text)
            rewritten += 1
        return rewritten


class VCProjectTransform(Transform):
    """Removes source-control attributes from legacy Visual C++ projects."""

    extensions = tuple(VC_PROJECT_EXTENSIONS)

    def __init__(self, remove_scm_binding: bool = False, name: str = "vc_project"):
        super().__init__(name=name, enabled=remove_scm_binding)

    def transform(
        self, content: bytes, path: str, metadata: Optional[Dict[str, Any]] = None
    ) -> bytes:
        tree = parse_xml(content, path, self.name)
        root = tree.getroot()
        for attribute in SCM_PROPERTIES:
            root.attrib.pop(attribute, None)
        return serialize_xml(tree)


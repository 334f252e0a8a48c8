"""Shared pytest fixtures for srcexport tests."""
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from srcexport.core.constants import ReadOnlyPolicy
from srcexport.core.logging import RecordingExportLog
from srcexport.core.settings import Settings

SOLUTION_TEXT = (
    "Microsoft Visual Studio Solution File, Format Version 12.00\r\n"
    'Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "App", "App\\App.csproj", '
    '"{11111111-1111-1111-1111-111111111111}"\r\n'
    "EndProject\r\n"
    'Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "Tests", "Tests\\Tests.csproj", '
    '"{22222222-2222-2222-2222-222222222222}"\r\n'
    "EndProject\r\n"
    "Global\r\n"
    "\tGlobalSection(SourceCodeControl) = preSolution\r\n"
    "\t\tSccNumberOfProjects = 2\r\n"
    "\tEndGlobalSection\r\n"
    "\tGlobalSection(SolutionConfigurationPlatforms) = preSolution\r\n"
    "\t\tDebug|Any CPU = Debug|Any CPU\r\n"
    "\tEndGlobalSection\r\n"
    "EndGlobal\r\n"
)

CSPROJ_TEXT = """<?xml version="1.0" encoding="utf-8"?>
<Project ToolsVersion="4.0" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <PropertyGroup>
    <AssemblyName>App</AssemblyName>
    <SccProjectName>SAK</SccProjectName>
    <SccLocalPath>SAK</SccLocalPath>
    <SccAuxPath>SAK</SccAuxPath>
    <SccProvider>SAK</SccProvider>
  </PropertyGroup>
  <ItemGroup>
    <Reference Include="Vendor">
      <HintPath>..\\..\\..\\outside\\Vendor.dll</HintPath>
    </Reference>
  </ItemGroup>
  <ItemGroup>
    <Compile Include="Program.cs" />
  </ItemGroup>
</Project>
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Create a small Visual Studio style source tree."""
    source = temp_dir / "source"
    source.mkdir()

    (source / "App.sln").write_bytes(SOLUTION_TEXT.encode("utf-8"))
    (source / "README.md").write_text("# App\n\nExported sample\n")
    (source / "notes.bak").write_text("old notes")
    (source / "notes.bak.txt").write_text("current notes")

    (source / "App").mkdir()
    (source / "App" / "App.csproj").write_text(CSPROJ_TEXT)
    (source / "App" / "Program.cs").write_text("class Program { }\n")
    (source / "App" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00binary")

    (source / "App" / "bin").mkdir()
    (source / "App" / "bin" / "App.dll").write_bytes(b"MZ\x00\x00")
    (source / "App" / "obj").mkdir()
    (source / "App" / "obj" / "App.pdb").write_bytes(b"\x00pdb")

    return source


@pytest.fixture
def dest_dir(temp_dir: Path) -> Path:
    """Destination directory path (not created)."""
    return temp_dir / "dest"


@pytest.fixture
def recording_log() -> RecordingExportLog:
    """Export log keeping every event in memory."""
    return RecordingExportLog()


@pytest.fixture
def plain_settings() -> Settings:
    """Settings with every option off: a verbatim copy."""
    return Settings(output_read_only=ReadOnlyPolicy.UNCHANGED)

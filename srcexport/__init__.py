"""srcexport - Export a clean copy of a source tree.

Copies a source directory while excluding build output and IDE state,
stripping source-control bindings from Visual Studio solutions and projects,
substituting text in paths and files, verifying copies by hash and keeping
symbolic links.

Example:
    >>> from srcexport import Exporter, Settings
    >>> Exporter("/work/MyApp", Settings.default()).export("/release/MyApp")
"""

from srcexport.core.constants import SRCEXPORT_VERSION
from srcexport.core.settings import Settings
from srcexport.exporter import Exporter, ExportResult

__version__ = SRCEXPORT_VERSION

__all__ = [
    "Exporter",
    "ExportResult",
    "Settings",
    "__version__",
]

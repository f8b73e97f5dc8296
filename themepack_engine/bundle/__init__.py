from .orchestrator import BundleOrchestrator, allocate_temp_bundle, build_tasks, bundle_theme
from .writer import ArchiveAssembler, ArchiveWriter, build_entries, select_passthrough

__all__ = [
    "ArchiveAssembler",
    "ArchiveWriter",
    "BundleOrchestrator",
    "allocate_temp_bundle",
    "build_entries",
    "build_tasks",
    "bundle_theme",
    "select_passthrough",
]

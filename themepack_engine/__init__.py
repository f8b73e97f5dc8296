"""themepack engine - turns a theme source tree into a platform bundle."""

__version__ = "1.0.0"

from .bundle import BundleOrchestrator, bundle_theme
from .models import BundleConfig

__all__ = ["BundleConfig", "BundleOrchestrator", "bundle_theme", "__version__"]

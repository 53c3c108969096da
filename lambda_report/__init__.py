"""lambda-report: one-shot invocation telemetry reporter."""

__version__ = "1.4.0"

from .config import ReporterConfig, load_config  # noqa: E402
from .report import Report  # noqa: E402

__all__ = ["Report", "ReporterConfig", "load_config", "__version__"]

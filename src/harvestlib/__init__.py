# harvestlib: resilient FTP sessions and plumbing for long-running harvesting jobs.
#
# Heavier pieces are imported on demand:
#   from harvestlib.io.ftp import ResilientFTP, TrackedFTP
#   from harvestlib.processor import Processor
from harvestlib import config  # noqa: F401

__version__ = "0.1.0"

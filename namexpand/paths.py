import logging
import os
from pathlib import Path

logger = logging.getLogger("namexpand")

try:
    PACKAGE_ROOT_PATH = os.path.abspath(os.path.join(__file__, os.pardir))
except NameError:
    PACKAGE_ROOT_PATH = os.path.abspath(os.path.join(os.getcwd(), "namexpand"))

DATA_PATH = Path(PACKAGE_ROOT_PATH) / "data"

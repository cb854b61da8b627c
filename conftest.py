# Project root on sys.path so `bitforex_connector` and `tests.fixtures` import without installation
import sys
import pathlib

root = pathlib.Path(__file__).parent.resolve()
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

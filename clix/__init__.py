__title__ = 'clix'
__author__ = 'clix contributors'
__license__ = 'MIT'
__version__ = "0.1.0"

from .utils import *
from .coercion import *
from .faults import *
from .terminal import *
from .schema import *
from .extensions import *
from .results import *
from .parser import *
from .decode import *
from .help import *
from .ask import *
from .bind import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the helpers
__all__ += utils.__all__  # type: ignore[attr-defined]
# Load the exposed API of the value coercion
__all__ += coercion.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the terminal
__all__ += terminal.__all__  # type: ignore[attr-defined]
# Load the exposed API of the schema
__all__ += schema.__all__  # type: ignore[attr-defined]
# Load the exposed API of the extensions
__all__ += extensions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the results
__all__ += results.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parser
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the decoder
__all__ += decode.__all__  # type: ignore[attr-defined]
# Load the exposed API of the bundled extensions
__all__ += help.__all__  # type: ignore[attr-defined]
__all__ += ask.__all__  # type: ignore[attr-defined]
__all__ += bind.__all__  # type: ignore[attr-defined]

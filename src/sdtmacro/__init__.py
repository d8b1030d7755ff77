"""SDT Macro Extender.

Fetches JSON from configured HTTP(S) endpoints and substitutes ``~e``/``~i``/
``~n`` macros in SuperDateTime display format strings with the fetched values.
"""

from sdtmacro.pipeline import MacroRequest, MacroService

__version__ = "0.3.0"

__all__ = ["MacroRequest", "MacroService", "__version__"]

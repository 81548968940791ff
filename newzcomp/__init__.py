"""
newzcomp - multi-source news bias comparison.

Given a seed article (or a news theme that yields seed articles), this
package finds coverage of the same story from other trusted outlets,
scrapes it, and asks a language model for a structured bias analysis.
Only results that pass the validation gate are persisted.

Main entry point is the CLI via `newzcomp run` and `newzcomp analyze`.

Example:
    $ newzcomp run --theme Politics -o out/
"""

__all__ = ["__version__", "DomainAllowList", "load_allowlist", "PipelineRecord"]
__version__ = "0.1.0"

from .core.allowlist import DomainAllowList, load_allowlist
from .core.types import PipelineRecord

from typing import List, Optional
from pydantic import BaseModel, Field


class ExportOptions(BaseModel):
    """Options for one module export run."""

    # Hops from the root module via link-discovered modules
    max_depth: int = Field(default=2, ge=0)

    # Attribute names never exported (e.g. host bookkeeping attributes)
    exclude_attributes: List[str] = []

    # Link types to export; None exports every type
    include_link_types: Optional[List[str]] = None

    # JSON indentation; None writes compact output
    indent: Optional[int] = 2

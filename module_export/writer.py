import logging
import os
from pathlib import Path
from typing import Union

import aiofiles

logger = logging.getLogger(__name__)


async def save_export(data: bytes, output_file: Union[str, Path]) -> Path:
    """Writes serialized export bytes to the output file, creating its directory."""
    output_path = Path(output_file)
    os.makedirs(output_path.parent, exist_ok=True)

    async with aiofiles.open(output_path, "wb") as f:
        await f.write(data)

    logger.info(f"Saved export ({len(data)} bytes) to {output_path}")
    return output_path

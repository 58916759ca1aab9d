"""CSV export of query results, written with pandas."""

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

import pandas

logger = logging.getLogger(__name__)


def gen_csv(
    records: Sequence[Mapping[str, Any]], path: Union[str, Path]
) -> bool:
    """
    Writes records (e.g. ``{"id": ..., "title": ...}``) as a CSV file.

    Columns follow the keys of the records, with a header row. Nothing is
    written for an empty collection.

    Returns:
        True if the file was written.
    """

    if not records:
        logger.info(f"No records, {path} not written.")
        return False

    frame = pandas.DataFrame.from_records(list(records))
    frame.to_csv(path, index=False)

    logger.info(f"Wrote {len(frame)} records to {path}")
    return True

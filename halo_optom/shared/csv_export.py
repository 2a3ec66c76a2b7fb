"""CSV export helpers"""

import csv
import io
from typing import Iterable, Sequence

from fastapi.responses import StreamingResponse


def rows_to_csv(header: Sequence[str], rows: Iterable[Sequence]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return output.getvalue()


def csv_response(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        iter([content]),
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={filename}",
            "Cache-Control": "no-cache",
        },
    )

from fastapi import Response


def attachment(content: bytes, filename: str, media_type: str) -> Response:
    """Binary download answered in one piece."""
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def csv_attachment(content: bytes, filename: str) -> Response:
    return attachment(content, filename, "text/csv; charset=utf-8")


def pdf_attachment(content: bytes, filename: str) -> Response:
    return attachment(content, filename, "application/pdf")

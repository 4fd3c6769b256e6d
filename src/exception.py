# src/exception.py
from fastapi import HTTPException, status

BadRequestException = lambda detail="Bad request": HTTPException(
    status_code=status.HTTP_400_BAD_REQUEST, detail=detail
)
PayloadTooLargeException = lambda detail="File too large": HTTPException(
    status_code=413, detail=detail
)

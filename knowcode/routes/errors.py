"""Translate service errors into HTTP errors."""
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import HTTPException, status

from knowcode.client import ApiError, SessionExpired
from knowcode.services.admin_router import RouteError
from knowcode.services.exam_session import ExamFlowError


@contextmanager
def http_errors() -> Iterator[None]:
    try:
        yield
    except ExamFlowError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    except RouteError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SessionExpired as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except ApiError as exc:
        raise HTTPException(status_code=502, detail=exc.message) from exc
    except (KeyError, IndexError) as exc:
        raise HTTPException(status_code=404, detail="Not found") from exc

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from homecare.auth import jwt_handler
from homecare.auth.dependencies import get_current_user, require_role


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_access_token_round_trips_subject_and_role() -> None:
    token = jwt_handler.create_access_token(subject='worker@example.com', role='worker')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == 'worker@example.com'
    assert payload['role'] == 'worker'


def test_get_current_user_loads_user_from_token(scheduling_db, worker) -> None:
    token = jwt_handler.create_access_token(subject=worker.email, role=worker.role)

    user = get_current_user(credentials=_credentials(token), db=scheduling_db)

    assert user.id == worker.id


def test_get_current_user_rejects_invalid_token(scheduling_db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials('not-a-token'), db=scheduling_db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid token'


def test_get_current_user_rejects_unknown_user(scheduling_db) -> None:
    token = jwt_handler.create_access_token(subject='ghost@example.com', role='patient')

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(credentials=_credentials(token), db=scheduling_db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'User not found'


def test_require_role_rejects_other_roles(patient) -> None:
    dependency = require_role('worker')

    with pytest.raises(HTTPException) as exception_info:
        dependency(current_user=patient)

    assert exception_info.value.status_code == 403


def test_require_role_passes_matching_user(worker) -> None:
    assert require_role('worker', 'admin')(current_user=worker) is worker

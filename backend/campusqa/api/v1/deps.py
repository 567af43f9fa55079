from typing import Optional

from fastapi import Header

from campusqa.core.exceptions import MissingIdentityError


def get_current_user_id(x_user_id: Optional[int] = Header(None, alias="X-User-Id")) -> int:
    """
    Caller identity, resolved upstream by the auth gateway and forwarded in
    the X-User-Id header.
    """
    if x_user_id is None:
        raise MissingIdentityError()
    return x_user_id

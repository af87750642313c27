# ccube/core/device.py
from fastapi import Header, HTTPException, status

MAX_DEVICE_ID_LENGTH = 100


def require_device_id(
    x_device_id: str | None = Header(default=None),
) -> str:
    """
    Resolve the anonymous device id that owns a cart.

    The storefront generates the id once per browser and sends it as
    the `X-Device-ID` header on every cart request.

    Raises:
        HTTPException(400): if the header is missing, blank or too long.
    """
    if x_device_id is None or not x_device_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Device-ID header",
        )

    device_id = x_device_id.strip()
    if len(device_id) > MAX_DEVICE_ID_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Device-ID header",
        )
    return device_id

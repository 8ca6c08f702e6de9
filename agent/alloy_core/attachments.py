"""
Attachment upload: PUT /Object/<id>/Attachments with a base64 body.
"""

import base64
from pathlib import Path

from .api import invoke
from .config import log
from .constants import ATTACHMENTS_ENDPOINT


def encode_file(file_path):
    """Read the whole file and return (file name, base64 text)."""
    path = Path(file_path)
    data = path.read_bytes()
    return path.name, base64.b64encode(data).decode("ascii")


def upload_attachment(credentials, token, base_url, object_id, file_path,
                      description="", max_tries=0, timeout=None):
    """Attach `file_path` to record `object_id`. Returns the result envelope."""
    file_name, encoded = encode_file(file_path)
    params = {
        "FileName": file_name,
        "Description": description or "",
        "Data": encoded,
    }
    endpoint = ATTACHMENTS_ENDPOINT.format(object_id=object_id)

    log.info("Uploading %s (%d base64 chars) to object %s", file_name, len(encoded), object_id)
    return invoke(
        credentials, token, base_url,
        endpoint=endpoint,
        params=params,
        method="PUT",
        max_tries=max_tries,
        timeout=timeout,
    )

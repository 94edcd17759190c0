# apps/utils/responses.py
from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data=None, message=None, status=http_status.HTTP_200_OK, **extra):
    """
    Standard success envelope: {success: true, data?, message?}
    """
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return Response(body, status=status)

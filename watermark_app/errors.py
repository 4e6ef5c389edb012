"""Error taxonomy shared by the watermark core and the request handlers.

Each error carries the HTTP status it maps to; ``main.py`` turns them into
``{"error": message}`` responses.
"""


class WatermarkAppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(WatermarkAppError):
    status_code = 401


class ValidationError(WatermarkAppError):
    status_code = 400


class NotFoundError(WatermarkAppError):
    status_code = 404


class ProcessingError(WatermarkAppError):
    """Rasterize, composite or encode step failed"""
    status_code = 500


class UnprocessableImageError(ProcessingError):
    """Input bytes could not be decoded as an image"""
    status_code = 422

"""
Error taxonomy shared by the services and the HTTP layer.

Each error carries the status code the API answers with; the handlers
registered in filekeeper.main render them as {"error": "<message>"}.
"""

class FileKeeperError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(FileKeeperError):
    status_code = 404


class BadRequest(FileKeeperError):
    status_code = 400


class StorageError(FileKeeperError):
    status_code = 500

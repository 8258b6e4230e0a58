class SkeletonError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ConfigError(SkeletonError):
    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class UnsupportedDatabaseError(SkeletonError):
    def __init__(self, dsn: str):
        super().__init__(f"unsupported database type: {dsn}", status_code=500)


class QueryBindError(SkeletonError):
    def __init__(self, message: str):
        super().__init__(message, status_code=400)
